"""Synthetic data generator (periodic readings for active devices)"""
import asyncio
import random
from typing import TYPE_CHECKING, Optional

from config.logger import logger
from models.schemas import Reading, utcnow
from services.fallback import with_fallback
from services.storage import make_reading, mock_id

if TYPE_CHECKING:
    from context.telemetry import TelemetryContext


def random_temperature() -> float:
    """Temperature in [20, 30) with one decimal"""
    return random.randrange(200, 300) / 10


def random_humidity() -> float:
    """Humidity in [40, 60) with one decimal"""
    return random.randrange(400, 600) / 10


class DataGenerator:
    """Appends one reading per active device every `interval` seconds"""

    def __init__(self, telemetry: "TelemetryContext", interval: float):
        self.telemetry = telemetry
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._pending: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Start generating data periodically"""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started automatic data generation every {self.interval:g} seconds")

    async def stop(self):
        """Stop the timer and wait for in-flight database writes"""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Stopped automatic data generation")
        await self.wait_pending()

    async def wait_pending(self):
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.tick()
            except Exception as e:
                logger.error(f"Data generation error: {e}", exc_info=True)

    def tick(self) -> list[Reading]:
        """Generate one reading per active device"""
        now = utcnow()
        self.telemetry.last_updated = now

        devices = self.telemetry.store.active_devices()
        if not devices:
            logger.info("No active devices to generate data for")
            return []

        readings = []
        for device_id in devices:
            reading = make_reading(
                mock_id(device_id),
                device_id,
                random_temperature(),
                random_humidity(),
                now,
            )
            self.telemetry.store.add(reading)
            self._persist(reading)
            readings.append(reading)

        logger.info(f"Generated new data at {now.isoformat()} for {len(devices)} devices")
        return readings

    def _persist(self, reading: Reading):
        """Fire-and-forget database write"""
        repository = self.telemetry.repository
        if not repository.configured:
            return

        def log_error(error: Exception):
            logger.warning(f"Error saving generated data to DB: {error}")

        task = asyncio.create_task(with_fallback(
            repository.create(reading.device_id, reading.temperature, reading.humidity, reading.timestamp),
            None,
            on_error=log_error,
        ))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
