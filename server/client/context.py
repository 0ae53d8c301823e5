"""Dashboard data context: polls the API and falls back to mock data"""
import asyncio
from collections import deque
from datetime import datetime
from typing import Awaitable, Callable, Optional
from urllib.parse import quote

import httpx
from client.mock import generate_mock_data, local_reading, refresh_mock_data
from client.state import ConnectionState
from config.logger import client_logger as logger
from config.settings import (
    API_URL,
    DELETE_TIMEOUT,
    FETCH_ALL_TIMEOUT,
    FETCH_LATEST_TIMEOUT,
    FETCH_STATUS_TIMEOUT,
    HISTORY_SIZE,
    LATEST_POLL_SECONDS,
    POST_TIMEOUT,
    STATUS_POLL_SECONDS,
)
from models.schemas import DataResponse, Reading, StatusResponse, utcnow


class RejectedReading(Exception):
    """The API refused a reading (HTTP 400)"""


class DeviceDataContext:
    """
    Client-side view of the device data.

    Keeps the current readings, a bounded history per device and the
    connection state. While the API is unreachable every operation is
    served from local mock data instead.
    """

    def __init__(
        self,
        api_url: str = API_URL,
        client: Optional[httpx.AsyncClient] = None,
        latest_interval: float = LATEST_POLL_SECONDS,
        status_interval: float = STATUS_POLL_SECONDS,
        on_update: Optional[Callable[["DeviceDataContext"], None]] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None
        self.latest_interval = latest_interval
        self.status_interval = status_interval
        self.on_update = on_update

        self.state = ConnectionState()
        self.device_data: list[Reading] = []
        self.last_updated: Optional[datetime] = None
        self._history: dict[str, deque] = {}
        self._mock_data: list[Reading] = generate_mock_data()
        self._tasks: list[asyncio.Task] = []

    # Flags used by the views

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def api_available(self) -> bool:
        return self.state.api_available

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    # History

    def _add_to_history(self, reading: Reading):
        history = self._history.setdefault(reading.device_id, deque(maxlen=HISTORY_SIZE))
        history.appendleft({
            "temperature": reading.temperature,
            "humidity": reading.humidity,
            "timestamp": reading.timestamp,
        })

    def get_device_history(self, device_id: str) -> list[dict]:
        """Last readings of a device, newest first"""
        return list(self._history.get(device_id, ()))

    # State updates

    def _notify(self):
        if self.on_update is not None:
            self.on_update(self)

    def _apply(self, response: DataResponse):
        for reading in response.data:
            self._add_to_history(reading)
        self.device_data = list(response.data)
        self.last_updated = response.last_updated
        self.state = self.state.on_success()

    def _use_mock_data(self):
        self._mock_data = refresh_mock_data(self._mock_data)
        for reading in self._mock_data:
            self._add_to_history(reading)
        self.device_data = list(self._mock_data)
        self.last_updated = utcnow()

    def _degrade(self, reason: str):
        if not self.state.degraded:
            logger.warning(f"API unavailable, switching to mock data: {reason}")
        self.state = self.state.on_failure(reason)

    def _forget(self, device_ids: set[str]):
        self.device_data = [r for r in self.device_data if r.device_id not in device_ids]
        self._mock_data = [r for r in self._mock_data if r.device_id not in device_ids]
        for device_id in device_ids:
            self._history.pop(device_id, None)

    # Fetching

    async def _get_data(self, path: str, timeout: float) -> DataResponse:
        response = await self._client.get(f"{self.api_url}{path}", timeout=timeout)
        response.raise_for_status()
        return DataResponse.model_validate(response.json())

    async def _fetch(self, path: str, timeout: float, what: str):
        try:
            self._apply(await self._get_data(path, timeout))
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"API error ({what}): {e}")
            self._degrade(f"Error fetching data: {e}")
            self._use_mock_data()
        self._notify()

    async def fetch_all(self):
        """Fetch all device data"""
        await self._fetch("", FETCH_ALL_TIMEOUT, "all data")

    async def fetch_latest(self):
        """Fetch the latest reading of each device"""
        await self._fetch("/latest", FETCH_LATEST_TIMEOUT, "latest data")

    async def fetch_status(self) -> Optional[StatusResponse]:
        """Fetch simulation status and drop devices deleted on the server"""
        try:
            response = await self._client.get(f"{self.api_url}/status", timeout=FETCH_STATUS_TIMEOUT)
            response.raise_for_status()
            status = StatusResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.info(f"Error fetching simulation status: {e}")
            return None

        self.last_updated = status.last_updated
        if status.deleted_devices:
            self._forget(set(status.deleted_devices))
        self.state = self.state.on_success()
        self._notify()
        return status

    # Commands

    def _add_locally(self, device_id: str, temperature: float, humidity: float) -> Reading:
        reading = local_reading(device_id, float(temperature), float(humidity))
        for i, existing in enumerate(self._mock_data):
            if existing.device_id == device_id:
                self._mock_data[i] = existing.model_copy(update={
                    "temperature": reading.temperature,
                    "humidity": reading.humidity,
                    "timestamp": reading.timestamp,
                })
                break
        else:
            self._mock_data.append(reading)

        self._add_to_history(reading)
        self.device_data = list(self._mock_data)
        self.last_updated = utcnow()
        self._notify()
        return reading

    async def add_device_data(self, device_id: str, temperature: float, humidity: float) -> Reading:
        """Send a new reading (stored locally while the API is unavailable)"""
        if self.state.degraded:
            logger.info("Using mock data for submission")
            return self._add_locally(device_id, temperature, humidity)

        body = {"deviceId": device_id, "temperature": temperature, "humidity": humidity}
        try:
            response = await self._client.post(self.api_url, json=body, timeout=POST_TIMEOUT)
            if response.status_code == 400:
                raise RejectedReading(response.json().get("message", "Invalid reading"))
            response.raise_for_status()
            reading = Reading.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"API error during submission: {e}")
            self._degrade(f"Error saving data: {e}")
            return self._add_locally(device_id, temperature, humidity)

        self._add_to_history(reading)
        # Refresh all data to stay consistent with the server
        await self.fetch_all()
        return reading

    def _delete_locally(self, device_id: str) -> dict:
        before = len(self._mock_data)
        self._forget({device_id})
        self.last_updated = utcnow()
        self._notify()
        return {
            "success": True,
            "message": f"Successfully deleted device: {device_id} (local only)",
            "deletedCount": before - len(self._mock_data),
            "activeDevices": list(dict.fromkeys(r.device_id for r in self._mock_data)),
        }

    async def delete_device(self, device_id: str) -> dict:
        """Delete a device and all its data"""
        if self.state.degraded:
            return self._delete_locally(device_id)

        try:
            response = await self._client.delete(
                f"{self.api_url}/{quote(device_id, safe='')}",
                timeout=DELETE_TIMEOUT,
            )
            if response.status_code == 404:
                return response.json()
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"API error during deletion: {e}")
            self._degrade(f"Error deleting device: {e}")
            return self._delete_locally(device_id)

        logger.info(f"Deleted device {device_id}: {result.get('message')}")
        self._forget({device_id})
        self.last_updated = utcnow()
        self._notify()
        await self.fetch_status()
        return result

    # Polling

    async def _poll(self, fetch: Callable[[], Awaitable], interval: float):
        while True:
            await asyncio.sleep(interval)
            try:
                await fetch()
            except Exception as e:
                logger.error(f"Polling error: {e}", exc_info=True)

    async def start(self):
        """Initial load, then poll latest data and simulation status"""
        await self.fetch_all()
        self._tasks = [
            asyncio.create_task(self._poll(self.fetch_latest, self.latest_interval)),
            asyncio.create_task(self._poll(self.fetch_status, self.status_interval)),
        ]

    async def stop(self):
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "DeviceDataContext":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
