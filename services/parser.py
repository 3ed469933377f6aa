"""Parsing of ``sensors`` text output into structured readings."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Union

from models.errors import ParseConsistencyError
from models.records import SensorReading

logger = logging.getLogger(__name__)

METRIC_LINE = re.compile(
    r"^(?P<label>[^:]+):\s+(?P<value>[+-]?\d+(?:\.\d+)?)\s*(?P<units>[^0-9\s]+)"
)


@dataclass(frozen=True)
class NoCurrentDevice:
    """Waiting for the header line of the next device section."""


@dataclass(frozen=True)
class InDevice:
    """Inside the section introduced by header ``name``."""

    name: str


ParserState = Union[NoCurrentDevice, InDevice]


def _split_lines(text: str) -> List[str]:
    r"""Split on ``\n`` only, dropping the ``\r`` of ``\r\n`` endings."""
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


class SensorOutputParser:
    """Turns grouped, blank-line delimited ``sensors`` output into readings.

    Each section starts with a header line naming the chip, followed by
    ``label: value units [annotations]`` lines. Lines inside a section that do
    not look like a metric are skipped; the format differs between drivers.
    """

    def parse(self, text: str) -> List[SensorReading]:
        readings: List[SensorReading] = []
        state: ParserState = NoCurrentDevice()

        for line_number, line in enumerate(_split_lines(text), start=1):
            if isinstance(state, NoCurrentDevice):
                # Blank lines outside a section never become headers.
                if line:
                    state = InDevice(name=line)
                continue

            if not line:
                state = NoCurrentDevice()
                continue

            reading = self._parse_metric(state.name, line)
            if reading is None:
                logger.debug(
                    "Skipping unrecognized line",
                    extra={"device": state.name, "line_number": line_number},
                )
                continue
            readings.append(reading)

        return readings

    @staticmethod
    def _parse_metric(device: str, line: str) -> Optional[SensorReading]:
        match = METRIC_LINE.match(line)
        if match is None:
            return None

        raw_value = match.group("value")
        try:
            value = float(raw_value)
        except ValueError as exc:
            raise ParseConsistencyError(
                f"Matched value {raw_value!r} is not a number."
            ) from exc

        return SensorReading(
            device=device,
            label=match.group("label").strip(),
            value=value,
            units=match.group("units"),
        )


def parse_sensors_output(text: str) -> List[SensorReading]:
    """Parse one complete capture of ``sensors`` output."""
    return SensorOutputParser().parse(text)
