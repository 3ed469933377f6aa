from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


DEFAULT_SENSORS_PATH = "/usr/bin/sensors"
DEFAULT_DATABASE_PATH = "sensors.db"
DEFAULT_POLL_INTERVAL = 5.0

_SENSORS_PATH_ENV = "SENSORS_PATH"
_DATABASE_PATH_ENV = "SENSORS_DATABASE_PATH"
_POLL_INTERVAL_ENV = "SENSORS_POLL_INTERVAL"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    sensors_path: str
    database_path: str
    poll_interval: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_poll_interval(default: float) -> float:
    value = os.getenv(_POLL_INTERVAL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        sensors_path=_read_str_env(_SENSORS_PATH_ENV, DEFAULT_SENSORS_PATH),
        database_path=_read_str_env(_DATABASE_PATH_ENV, DEFAULT_DATABASE_PATH),
        poll_interval=_read_poll_interval(DEFAULT_POLL_INTERVAL),
        log_level=_read_log_level("INFO"),
    )
