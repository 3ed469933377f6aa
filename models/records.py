"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple


@dataclass(frozen=True, slots=True)
class SensorReading:
    """A single metric line parsed from ``sensors`` output."""

    device: str
    label: str
    value: float
    units: str


@dataclass(frozen=True, slots=True)
class PollResult:
    """Readings captured by one poll cycle, all sharing one acquisition time."""

    timestamp: datetime
    readings: Tuple[SensorReading, ...]
