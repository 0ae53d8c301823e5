"""Server-lifetime state shared by the HTTP handlers and the generator"""
from datetime import datetime
from typing import Optional

from config.logger import logger
from config.settings import APP_ENV, REQUIRE_DATABASE, UPDATE_INTERVAL_SECONDS
from database.db import DeviceDataRepository
from fastapi import Request
from models.schemas import utcnow
from services.generator import DataGenerator
from services.storage import FallbackStore


class TelemetryContext:
    """
    Owns the persistence adapter, the fallback store, the last-updated
    timestamp and the data generator.
    """

    def __init__(
        self,
        repository: DeviceDataRepository,
        store: Optional[FallbackStore] = None,
        update_interval: float = UPDATE_INTERVAL_SECONDS,
    ):
        self.repository = repository
        if store is None:
            store = FallbackStore()
            store.seed()
        self.store = store
        self.last_updated: datetime = utcnow()
        self.persistence_ready = False
        self.generator = DataGenerator(self, update_interval)

    @property
    def update_interval_ms(self) -> int:
        return int(self.generator.interval * 1000)

    @property
    def persistence_status(self) -> str:
        if not self.repository.configured:
            return "disabled"
        return "connected" if self.persistence_ready else "unavailable"

    async def connect(self, require_database: bool = False):
        """Initialize the database, stay in degraded mode if it fails"""
        if not self.repository.configured:
            logger.warning("DATABASE_URL is not set, running with in-memory data only")
            if require_database:
                raise RuntimeError("Application requires a database connection in production mode")
            return

        try:
            await self.repository.init()
            self.persistence_ready = True
        except Exception as e:
            logger.error(f"Database error: {type(e).__name__}: {e}")
            if require_database:
                raise RuntimeError("Application requires a database connection in production mode") from e
            logger.warning("Continuing without database connection, using in-memory data")

    async def start(self, require_database: bool = False):
        await self.connect(require_database)
        self.generator.start()

    async def stop(self):
        await self.generator.stop()


def build_context(database_url: str) -> TelemetryContext:
    return TelemetryContext(DeviceDataRepository.from_url(database_url))


def require_database() -> bool:
    return APP_ENV == "production" and REQUIRE_DATABASE


def get_telemetry(request: Request) -> TelemetryContext:
    """FastAPI dependency giving handlers access to the telemetry context"""
    return request.app.state.telemetry
