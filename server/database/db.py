"""Database logic"""
from datetime import datetime, timezone
from typing import Optional

import aiosqlite
from config.logger import logger
from models.schemas import Reading, utcnow

SQLITE_PREFIXES = ("sqlite+aiosqlite:///", "sqlite:///")


class TelemetryError(Exception):
    """Base error for the telemetry server"""


class PersistenceUnavailable(TelemetryError):
    """Raised when no database is configured"""


def database_path(url: Optional[str]) -> Optional[str]:
    """Turn a connection string into a SQLite file path (None if not configured)"""
    if not url or not url.strip():
        return None
    url = url.strip()
    for prefix in SQLITE_PREFIXES:
        if url.startswith(prefix):
            return url[len(prefix):]
    return url


def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC ISO string, so that text order is chronological order"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _row_to_reading(row: aiosqlite.Row) -> Reading:
    return Reading(
        id=str(row["id"]),
        device_id=row["device_id"],
        temperature=row["temperature"],
        humidity=row["humidity"],
        timestamp=parse_timestamp(row["timestamp"]),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


class DeviceDataRepository:
    """Persistence adapter for device readings (async SQLite)"""

    def __init__(self, db_path: Optional[str]):
        self.db_path = db_path

    @classmethod
    def from_url(cls, url: Optional[str]) -> "DeviceDataRepository":
        return cls(database_path(url))

    @property
    def configured(self) -> bool:
        return self.db_path is not None

    def _connect(self):
        if self.db_path is None:
            raise PersistenceUnavailable("Database is not configured")
        return aiosqlite.connect(self.db_path)

    async def init(self):
        """Create the device_data table (async)"""
        async with self._connect() as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS device_data (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    device_id TEXT NOT NULL,
                    temperature REAL NOT NULL,
                    humidity REAL NOT NULL,
                    timestamp TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_device_timestamp ON device_data(device_id, timestamp)
            """)
            await db.commit()
        logger.info(f"Database ready at {self.db_path}")

    async def create(
        self,
        device_id: str,
        temperature: float,
        humidity: float,
        timestamp: datetime,
    ) -> Reading:
        """Insert one reading and return it with its generated id"""
        now = format_timestamp(utcnow())
        async with self._connect() as db:
            cursor = await db.execute("""
                INSERT INTO device_data (device_id, temperature, humidity, timestamp, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (device_id, temperature, humidity, format_timestamp(timestamp), now, now))
            await db.commit()
            row_id = cursor.lastrowid
        return Reading(
            id=str(row_id),
            device_id=device_id,
            temperature=temperature,
            humidity=humidity,
            timestamp=timestamp,
            created_at=parse_timestamp(now),
            updated_at=parse_timestamp(now),
        )

    async def find_recent(self, limit: int = 100) -> list[Reading]:
        """Newest readings first"""
        async with self._connect() as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM device_data ORDER BY timestamp DESC, id DESC LIMIT ?",
                (limit,)
            )
            rows = await cursor.fetchall()
        return [_row_to_reading(row) for row in rows]

    async def aggregate_latest(self) -> list[Reading]:
        """Latest reading per device (last inserted wins on equal timestamps)"""
        async with self._connect() as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("""
                SELECT * FROM device_data AS d
                WHERE d.id = (
                    SELECT l.id FROM device_data AS l
                    WHERE l.device_id = d.device_id
                    ORDER BY l.timestamp DESC, l.id DESC
                    LIMIT 1
                )
                ORDER BY d.device_id
            """)
            rows = await cursor.fetchall()
        return [_row_to_reading(row) for row in rows]

    async def delete_many(self, device_id: str) -> int:
        """Delete every reading of a device, returns the deleted row count"""
        async with self._connect() as db:
            cursor = await db.execute(
                "DELETE FROM device_data WHERE device_id = ?",
                (device_id,)
            )
            deleted_count = cursor.rowcount
            await db.commit()
        if deleted_count > 0:
            logger.info(f"Deleted {deleted_count} records of {device_id} from database")
        return deleted_count

    async def count(self) -> int:
        """Get total number of records"""
        async with self._connect() as db:
            cursor = await db.execute("SELECT COUNT(*) FROM device_data")
            row = await cursor.fetchone()
            return row[0] if row else 0
