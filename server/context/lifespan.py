"""Application lifespan management"""
from contextlib import asynccontextmanager

from config.logger import logger
from config.settings import APP_ENV, DATABASE_URL
from context.telemetry import build_context, require_database


@asynccontextmanager
async def lifespan(app):
    """
    Manage application lifespan (startup and shutdown).

    The telemetry context is built from the environment unless one was
    already attached to ``app.state`` (tests inject their own).
    """
    # Startup
    logger.info(f"Starting application ({APP_ENV})...")
    telemetry = getattr(app.state, "telemetry", None)
    if telemetry is None:
        telemetry = build_context(DATABASE_URL)
        app.state.telemetry = telemetry

    await telemetry.start(require_database=require_database())
    logger.info(f"Application started successfully (persistence: {telemetry.persistence_status})")

    yield  # Application is running

    # Shutdown
    logger.info("Shutting down application...")
    await telemetry.stop()
    logger.info("Application shut down successfully")
