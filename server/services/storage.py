"""In-memory fallback storage used when the database is unavailable"""
import time
from collections import deque
from datetime import datetime
from typing import Iterable, Optional

from config.settings import DEFAULT_DEVICES, FALLBACK_MAX_SIZE
from models.schemas import Reading, utcnow

# Readings loaded at startup so the dashboard has something to show
SEED_READINGS = [
    ("mock1", "device001", 23.5, 48.2),
    ("mock2", "device002", 21.8, 52.4),
    ("mock3", "device003", 24.2, 45.7),
]


def mock_id(device_id: Optional[str] = None) -> str:
    """Ids of records that only live in memory"""
    suffix = f"_{device_id}" if device_id else ""
    return f"mock{int(time.time() * 1000)}{suffix}"


def make_reading(
    reading_id: str,
    device_id: str,
    temperature: float,
    humidity: float,
    timestamp: Optional[datetime] = None,
) -> Reading:
    timestamp = timestamp or utcnow()
    return Reading(
        id=reading_id,
        device_id=device_id,
        temperature=temperature,
        humidity=humidity,
        timestamp=timestamp,
        created_at=timestamp,
        updated_at=timestamp,
    )


class FallbackStore:
    """Bounded newest-first buffer of readings plus the deleted device set"""

    def __init__(self, max_size: int = FALLBACK_MAX_SIZE, known_devices: Iterable[str] = DEFAULT_DEVICES):
        self.readings: deque = deque(maxlen=max_size)
        self.known_devices = list(known_devices)
        self.deleted_devices: set[str] = set()

    def seed(self):
        """Load the startup mock readings"""
        now = utcnow()
        for reading_id, device_id, temperature, humidity in reversed(SEED_READINGS):
            self.add(make_reading(reading_id, device_id, temperature, humidity, now))

    def add(self, reading: Reading):
        """Add newest reading (oldest is evicted when full)"""
        self.readings.appendleft(reading)

    def all_sorted(self) -> list[Reading]:
        """Whole buffer, newest timestamp first"""
        # Stable sort keeps insertion order (newest first) for equal timestamps
        return sorted(self.readings, key=lambda r: r.timestamp, reverse=True)

    def latest_per_device(self) -> list[Reading]:
        """Latest reading per device (last inserted wins on equal timestamps)"""
        latest: dict[str, Reading] = {}
        for reading in self.readings:
            current = latest.get(reading.device_id)
            if current is None or reading.timestamp > current.timestamp:
                latest[reading.device_id] = reading
        return sorted(latest.values(), key=lambda r: r.device_id)

    def delete_device(self, device_id: str) -> int:
        """Remove every buffered reading of a device, returns how many"""
        kept = [r for r in self.readings if r.device_id != device_id]
        removed = len(self.readings) - len(kept)
        self.readings.clear()
        self.readings.extend(kept)
        return removed

    def active_devices(self) -> list[str]:
        return [d for d in self.known_devices if d not in self.deleted_devices]

    def mark_deleted(self, device_id: str):
        self.deleted_devices.add(device_id)

    def reactivate(self, device_id: str) -> bool:
        """Un-delete a device, True if it was deleted"""
        if device_id in self.deleted_devices:
            self.deleted_devices.discard(device_id)
            return True
        return False

    def __len__(self) -> int:
        return len(self.readings)
