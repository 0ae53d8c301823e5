"""Request logging middleware"""
import time

from config.logger import logger
from fastapi import Request


async def log_requests(request: Request, call_next):
    """Log failed requests as warnings, everything else at debug level"""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    message = f"{request.method} {request.url.path} - Status: {response.status_code} ({elapsed_ms:.1f} ms)"
    if response.status_code >= 400:
        logger.warning(message)
    else:
        logger.debug(message)
    return response
