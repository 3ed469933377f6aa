from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from settings import get_settings


@dataclass(frozen=True)
class SamplerConfig:
    sensors_path: Path
    database_path: Path
    poll_interval: float
    log_level: str


def load_config(
    sensors_path: Optional[Path] = None,
    database_path: Optional[Path] = None,
    poll_interval: Optional[float] = None,
    log_level: Optional[str] = None,
) -> SamplerConfig:
    """Overlay explicit command line values on the environment settings."""
    settings = get_settings()
    return SamplerConfig(
        sensors_path=sensors_path or Path(settings.sensors_path),
        database_path=database_path or Path(settings.database_path),
        poll_interval=poll_interval if poll_interval is not None else settings.poll_interval,
        log_level=(log_level or settings.log_level).upper(),
    )
