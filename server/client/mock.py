"""Client-side mock data, used while the API is unreachable"""
import random
import time
from typing import Optional

from models.schemas import Reading, utcnow

MOCK_DEVICES = ["device001", "device002", "device003"]


def random_temperature() -> float:
    """Temperature between 15-35 °C"""
    return random.randrange(150, 350) / 10


def random_humidity() -> float:
    """Humidity between 30-80 %"""
    return random.randrange(300, 800) / 10


def local_reading(
    device_id: str,
    temperature: float,
    humidity: float,
    reading_id: Optional[str] = None,
) -> Reading:
    return Reading(
        id=reading_id or f"mock{int(time.time() * 1000)}",
        device_id=device_id,
        temperature=temperature,
        humidity=humidity,
        timestamp=utcnow(),
    )


def generate_mock_data() -> list[Reading]:
    return [
        local_reading(device_id, random_temperature(), random_humidity(), reading_id=f"mock{i}")
        for i, device_id in enumerate(MOCK_DEVICES, start=1)
    ]


def refresh_mock_data(readings: list[Reading]) -> list[Reading]:
    """Same devices, new random values"""
    now = utcnow()
    return [
        reading.model_copy(update={
            "temperature": random_temperature(),
            "humidity": random_humidity(),
            "timestamp": now,
        })
        for reading in readings
    ]
