"""Poll cycle driver: source, parser, timestamp, store, sleep."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Optional, Protocol

from datastore.sqlite_store import SensorStore, build_default_store
from models.records import PollResult
from services.parser import SensorOutputParser
from settings import get_settings
from sources.sensors_command import build_default_source

logger = logging.getLogger(__name__)


class SensorSource(Protocol):
    def read(self) -> str: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SamplerService:
    """Samples the sensor source at a fixed interval and persists every batch.

    Runs on the calling thread. Errors from any collaborator propagate
    unchanged; there is no retry and no partial cycle.
    """

    def __init__(
        self,
        source: SensorSource,
        store: SensorStore,
        parser: Optional[SensorOutputParser] = None,
        interval: float = 5.0,
        clock: Callable[[], datetime] = _utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("Poll interval must be positive.")
        self.source = source
        self.store = store
        self.parser = parser or SensorOutputParser()
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._cycles = 0

    def poll_once(self) -> PollResult:
        """Run a single poll cycle and return what was stored."""
        raw = self.source.read()
        readings = tuple(self.parser.parse(raw))
        timestamp = self._clock()
        self.store.append(timestamp, readings)

        self._cycles += 1
        logger.info(
            "Stored sensor readings",
            extra={"cycle": self._cycles, "reading_count": len(readings)},
        )
        return PollResult(timestamp=timestamp, readings=readings)

    def run(self, max_cycles: Optional[int] = None) -> int:
        """Poll until externally stopped, or for ``max_cycles`` cycles."""
        logger.info("Starting sampler", extra={"interval": self.interval})
        completed = 0
        while max_cycles is None or completed < max_cycles:
            self.poll_once()
            completed += 1
            if max_cycles is not None and completed >= max_cycles:
                break
            self._sleep(self.interval)
        return completed


@lru_cache
def build_default_sampler(
    sensors_path: Optional[str] = None,
    database_path: Optional[str] = None,
    interval: Optional[float] = None,
) -> SamplerService:
    """Factory that wires the sampler with settings-driven collaborators.

    Unset arguments fall back to the environment settings.
    """
    settings = get_settings()
    return SamplerService(
        source=build_default_source(binary_path=sensors_path),
        store=build_default_store(path=database_path),
        interval=settings.poll_interval if interval is None else interval,
    )
