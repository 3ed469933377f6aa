from __future__ import annotations

import logging
import subprocess
from functools import lru_cache
from pathlib import Path
from typing import Optional

from models.errors import SensorSourceError
from settings import get_settings

logger = logging.getLogger(__name__)


class SensorsCommand:
    """Runs the ``sensors`` binary and returns its decoded output."""

    def __init__(self, binary_path: Path) -> None:
        self.binary_path = binary_path

    def read(self) -> str:
        """Execute the binary once; any failure is fatal to the caller."""
        logger.debug("Running sensors binary", extra={"sensors_path": str(self.binary_path)})
        try:
            completed = subprocess.run(
                [str(self.binary_path)],
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise SensorSourceError(
                f"Error executing sensors binary {str(self.binary_path)!r}: {exc}"
            ) from exc

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise SensorSourceError(
                f"Sensors binary {str(self.binary_path)!r} exited with status "
                f"{completed.returncode}: {stderr or 'no error output.'}"
            )

        try:
            return completed.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SensorSourceError(
                "Invalid UTF-8 sequence in sensors binary output."
            ) from exc


@lru_cache
def build_default_source(binary_path: Optional[str] = None) -> SensorsCommand:
    settings = get_settings()
    path = settings.sensors_path if binary_path is None else binary_path
    return SensorsCommand(binary_path=Path(path))
