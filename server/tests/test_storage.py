from datetime import timedelta

from models.schemas import utcnow
from services.storage import FallbackStore, make_reading


def test_seed_loads_three_mock_readings():
    store = FallbackStore()
    store.seed()

    assert len(store) == 3
    assert [r.device_id for r in store.latest_per_device()] == ["device001", "device002", "device003"]
    assert store.latest_per_device()[0].temperature == 23.5


def test_buffer_evicts_oldest_when_full():
    store = FallbackStore(max_size=5)
    for i in range(8):
        store.add(make_reading(f"r{i}", "d1", 20.0 + i, 50.0))

    assert len(store) == 5
    assert [r.id for r in store.readings] == ["r7", "r6", "r5", "r4", "r3"]


def test_all_sorted_is_newest_first():
    store = FallbackStore()
    now = utcnow()
    store.add(make_reading("new", "d1", 21.0, 50.0, now))
    store.add(make_reading("old", "d2", 22.0, 50.0, now - timedelta(minutes=5)))

    assert [r.id for r in store.all_sorted()] == ["new", "old"]


def test_latest_per_device_picks_max_timestamp():
    store = FallbackStore()
    now = utcnow()
    store.add(make_reading("a1", "a", 20.0, 40.0, now - timedelta(seconds=30)))
    store.add(make_reading("b1", "b", 25.0, 45.0, now))
    store.add(make_reading("a2", "a", 21.0, 41.0, now))
    store.add(make_reading("a3", "a", 19.0, 39.0, now - timedelta(seconds=60)))

    latest = {r.device_id: r.id for r in store.latest_per_device()}
    assert latest == {"a": "a2", "b": "b1"}


def test_latest_per_device_last_inserted_wins_on_equal_timestamps():
    store = FallbackStore()
    now = utcnow()
    store.add(make_reading("first", "d1", 20.0, 40.0, now))
    store.add(make_reading("second", "d1", 21.0, 41.0, now))

    [latest] = store.latest_per_device()
    assert latest.id == "second"


def test_delete_device_removes_only_that_device():
    store = FallbackStore()
    store.seed()
    store.add(make_reading("x", "device001", 20.0, 40.0))

    assert store.delete_device("device001") == 2
    assert {r.device_id for r in store.readings} == {"device002", "device003"}
    assert store.delete_device("device001") == 0


def test_active_devices_and_reactivation():
    store = FallbackStore()
    store.mark_deleted("device002")

    assert store.active_devices() == ["device001", "device003"]
    assert store.reactivate("device002") is True
    assert store.reactivate("device002") is False
    assert store.active_devices() == ["device001", "device002", "device003"]
