"""Exception handlers"""
from config.logger import logger
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are reported like missing fields (400 + message)"""
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"message": f"Invalid request: {detail}"})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": str(exc) or "Internal server error"})
