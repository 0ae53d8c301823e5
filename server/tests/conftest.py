"""Shared fixtures"""
import aiosqlite
import httpx
import pytest
from app import create_app
from context.telemetry import TelemetryContext
from database.db import DeviceDataRepository
from fastapi.testclient import TestClient
from services.storage import FallbackStore

# Long enough that the timer never fires during a test
IDLE_INTERVAL = 3600


class UnreachableRepository(DeviceDataRepository):
    """Configured database that fails on every call"""

    def __init__(self):
        super().__init__("unreachable.db")

    def _connect(self):
        raise aiosqlite.OperationalError("unable to open database file")


@pytest.fixture
def repository(tmp_path):
    return DeviceDataRepository(str(tmp_path / "telemetry.db"))


@pytest.fixture
async def ready_repository(repository):
    await repository.init()
    return repository


@pytest.fixture
def telemetry(repository):
    return TelemetryContext(repository, store=FallbackStore(), update_interval=IDLE_INTERVAL)


@pytest.fixture
def degraded_telemetry():
    return TelemetryContext(UnreachableRepository(), store=FallbackStore(), update_interval=IDLE_INTERVAL)


@pytest.fixture
def client(telemetry):
    with TestClient(create_app(telemetry)) as test_client:
        yield test_client


@pytest.fixture
def degraded_client(degraded_telemetry):
    with TestClient(create_app(degraded_telemetry)) as test_client:
        yield test_client


@pytest.fixture
async def ready_telemetry(ready_repository):
    return TelemetryContext(ready_repository, store=FallbackStore(), update_interval=IDLE_INTERVAL)


@pytest.fixture
async def http_client(ready_telemetry):
    """Async client talking to the app in-process (no lifespan, no timer)"""
    transport = httpx.ASGITransport(app=create_app(ready_telemetry))
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
