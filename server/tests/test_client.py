import httpx
import pytest
from client.context import DeviceDataContext, RejectedReading
from client.state import Phase

API = "http://testserver/api/data"


def unreachable_client(calls: list):
    def handler(request: httpx.Request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_fetch_all_goes_live(http_client):
    await http_client.post(API, json={"deviceId": "d1", "temperature": 22.5, "humidity": 50})
    context = DeviceDataContext(API, client=http_client)
    assert context.loading is True

    await context.fetch_all()

    assert context.state.phase is Phase.LIVE
    assert context.loading is False
    assert context.error is None
    assert [r.device_id for r in context.device_data] == ["d1"]
    assert context.last_updated is not None
    assert context.get_device_history("d1")[0]["temperature"] == 22.5


async def test_history_keeps_ten_newest(http_client):
    await http_client.post(API, json={"deviceId": "d1", "temperature": 20.0, "humidity": 50})
    context = DeviceDataContext(API, client=http_client)

    for _ in range(12):
        await context.fetch_latest()

    assert len(context.get_device_history("d1")) == 10
    assert context.get_device_history("unknown") == []


async def test_fetch_failure_switches_to_mock_data():
    calls = []
    async with unreachable_client(calls) as client:
        context = DeviceDataContext(API, client=client)

        await context.fetch_all()
        first_error = context.error
        first_values = [(r.temperature, r.humidity) for r in context.device_data]
        await context.fetch_latest()

    assert context.loading is False
    assert context.api_available is False
    assert first_error.startswith("Error fetching data")
    assert context.error == first_error
    assert [r.device_id for r in context.device_data] == ["device001", "device002", "device003"]
    assert len(first_values) == 3
    assert len(context.get_device_history("device001")) == 2
    assert len(calls) == 2


async def test_add_while_degraded_stays_local():
    calls = []
    async with unreachable_client(calls) as client:
        context = DeviceDataContext(API, client=client)
        await context.fetch_all()
        calls.clear()

        reading = await context.add_device_data("device002", 25.0, 55.0)
        new = await context.add_device_data("lab", 19.5, 40.0)

    assert calls == []
    assert reading.id.startswith("mock")
    by_device = {r.device_id: r for r in context.device_data}
    assert by_device["device002"].temperature == 25.0
    assert by_device["lab"].id == new.id
    assert len(context.device_data) == 4


async def test_add_network_failure_degrades():
    async with unreachable_client([]) as client:
        context = DeviceDataContext(API, client=client)

        reading = await context.add_device_data("d1", 22.5, 50.0)

    assert context.api_available is False
    assert context.error.startswith("Error saving data")
    assert reading.device_id == "d1"
    assert "d1" in [r.device_id for r in context.device_data]
    assert context.get_device_history("d1")[0]["humidity"] == 50.0


async def test_add_against_api(http_client):
    context = DeviceDataContext(API, client=http_client)

    reading = await context.add_device_data("d1", 22.5, 50.0)

    assert reading.id == "1"
    assert context.state.phase is Phase.LIVE
    assert [r.device_id for r in context.device_data] == ["d1"]


async def test_add_rejected_by_api(http_client):
    context = DeviceDataContext(API, client=http_client)

    with pytest.raises(RejectedReading):
        await context.add_device_data("d1", None, 50.0)
    assert context.api_available is True


async def test_delete_against_api(http_client):
    context = DeviceDataContext(API, client=http_client)
    await context.add_device_data("d1", 22.5, 50.0)
    await context.add_device_data("d2", 23.5, 51.0)

    result = await context.delete_device("d1")

    assert result["success"] is True
    assert result["deletedCount"] == 1
    assert [r.device_id for r in context.device_data] == ["d2"]
    assert context.get_device_history("d1") == []


async def test_delete_unknown_device_reports_failure(http_client):
    context = DeviceDataContext(API, client=http_client)
    await context.fetch_all()

    result = await context.delete_device("ghost")

    assert result["success"] is False
    assert context.api_available is True


async def test_delete_network_failure_deletes_locally():
    async with unreachable_client([]) as client:
        context = DeviceDataContext(API, client=client)
        await context.fetch_all()
        context.state = context.state.on_success()

        result = await context.delete_device("device001")

    assert result["success"] is True
    assert result["message"].endswith("(local only)")
    assert result["deletedCount"] == 1
    assert result["activeDevices"] == ["device002", "device003"]
    assert context.api_available is False
    assert context.get_device_history("device001") == []


async def test_fetch_status_drops_server_deleted_devices(http_client, ready_telemetry):
    await http_client.post(API, json={"deviceId": "device001", "temperature": 22.5, "humidity": 50})
    await http_client.post(API, json={"deviceId": "device002", "temperature": 23.5, "humidity": 51})
    context = DeviceDataContext(API, client=http_client)
    await context.fetch_all()

    # Deleted behind the client's back
    await http_client.delete(f"{API}/device001")
    status = await context.fetch_status()

    assert status.deleted_devices == ["device001"]
    assert [r.device_id for r in context.device_data] == ["device002"]
    assert context.get_device_history("device001") == []
    assert context.last_updated == ready_telemetry.last_updated


async def test_fetch_status_failure_is_ignored():
    async with unreachable_client([]) as client:
        context = DeviceDataContext(API, client=client)

        assert await context.fetch_status() is None

    assert context.loading is True


async def test_start_and_stop(http_client):
    updates = []
    context = DeviceDataContext(API, client=http_client, on_update=updates.append)

    async with context:
        assert context.state.phase is Phase.LIVE
        assert len(context._tasks) == 2

    assert context._tasks == []
    assert updates
    assert not http_client.is_closed


async def test_server_error_degrades_but_rejection_does_not():
    def handler(request: httpx.Request):
        if request.method == "POST":
            return httpx.Response(400, json={"message": "Please provide all required fields"})
        return httpx.Response(503, json={"message": "unavailable"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        context = DeviceDataContext(API, client=client)

        with pytest.raises(RejectedReading):
            await context.add_device_data("d1", None, 50.0)
        assert context.api_available is True

        await context.fetch_latest()

    assert context.api_available is False
    assert context.error.startswith("Error fetching data")
