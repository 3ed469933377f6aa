from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from types import TracebackType
from typing import Iterable, List, Optional, Type

from models.errors import StoreError
from models.records import SensorReading
from models.schemas import StoredReading
from settings import get_settings

logger = logging.getLogger(__name__)

TABLE_NAME = "sensor_values"

_CREATE_TABLE = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    datetime TEXT NOT NULL,
    device TEXT NOT NULL,
    label TEXT NOT NULL,
    value REAL NOT NULL,
    units TEXT NOT NULL
)
"""

_INSERT_ROW = (
    f"INSERT INTO {TABLE_NAME} (datetime, device, label, value, units) "
    "VALUES (?, ?, ?, ?, ?)"
)


class SensorStore:
    """Append-only SQLite table of timestamped sensor readings."""

    def __init__(self, path: Path) -> None:
        self.path = path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(path))
        except (OSError, sqlite3.Error) as exc:
            raise StoreError(f"Failed to open database {str(path)!r}: {exc}") from exc

        try:
            with self._conn:
                self._conn.execute(_CREATE_TABLE)
        except sqlite3.Error as exc:
            self._conn.close()
            raise StoreError(f"Failed to create table {TABLE_NAME!r}: {exc}") from exc

        logger.debug("Opened sensor store", extra={"database_path": str(path)})

    def append(self, timestamp: datetime, readings: Iterable[SensorReading]) -> int:
        """Insert one row per reading, all stamped with ``timestamp``.

        The rows of one call are committed together.
        """
        stamp = timestamp.isoformat()
        rows = [
            (stamp, reading.device, reading.label, reading.value, reading.units)
            for reading in readings
        ]
        try:
            with self._conn:
                self._conn.executemany(_INSERT_ROW, rows)
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to insert sensor values: {exc}") from exc
        return len(rows)

    def scan(
        self, device: Optional[str] = None, limit: Optional[int] = None
    ) -> List[StoredReading]:
        """Return stored rows in insertion order.

        With ``limit`` only the most recent ``limit`` rows are returned.
        """
        query = f"SELECT rowid, datetime, device, label, value, units FROM {TABLE_NAME}"
        params: list = []
        if device is not None:
            query += " WHERE device = ?"
            params.append(device)
        query += " ORDER BY rowid DESC" if limit is not None else " ORDER BY rowid"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        try:
            rows = self._conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read sensor values: {exc}") from exc

        if limit is not None:
            rows.reverse()
        return [
            StoredReading(
                timestamp=stamp, device=device_name, label=label, value=value, units=units
            )
            for _rowid, stamp, device_name, label, value, units in rows
        ]

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "SensorStore":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


@lru_cache
def build_default_store(path: Optional[str] = None) -> SensorStore:
    settings = get_settings()
    database_path = settings.database_path if path is None else path
    return SensorStore(path=Path(database_path))
