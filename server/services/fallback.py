"""Fallback-first execution of persistence calls"""
from typing import Awaitable, Callable, TypeVar

from config.logger import logger

T = TypeVar("T")


def log_fallback_error(error: Exception):
    logger.warning(f"Using fallback data due to DB error: {type(error).__name__}: {error}")


async def with_fallback(
    operation: Awaitable[T],
    fallback: T,
    on_error: Callable[[Exception], None] = log_fallback_error,
) -> T:
    """Await the primary operation, return the fallback value if it fails"""
    try:
        return await operation
    except Exception as e:
        on_error(e)
        return fallback
