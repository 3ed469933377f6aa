"""Aggregation logic for stored sensor readings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from models.schemas import MetricSummary, StoredReading

MetricKey = Tuple[str, str, str]


@dataclass
class _RunningStats:
    count: int
    total: float
    min_value: float
    max_value: float
    first_seen: datetime
    last_seen: datetime


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def summarize(self, rows: Iterable[StoredReading]) -> List[MetricSummary]:
        """Group rows by device, label and units, in first-seen order."""
        stats: Dict[MetricKey, _RunningStats] = {}

        for row in rows:
            key = (row.device, row.label, row.units)
            current = stats.get(key)
            if current is None:
                stats[key] = _RunningStats(
                    count=1,
                    total=row.value,
                    min_value=row.value,
                    max_value=row.value,
                    first_seen=row.timestamp,
                    last_seen=row.timestamp,
                )
                continue

            current.count += 1
            current.total += row.value
            current.min_value = min(current.min_value, row.value)
            current.max_value = max(current.max_value, row.value)
            current.first_seen = min(current.first_seen, row.timestamp)
            current.last_seen = max(current.last_seen, row.timestamp)

        return [
            MetricSummary(
                device=device,
                label=label,
                units=units,
                count=item.count,
                min_value=item.min_value,
                max_value=item.max_value,
                mean_value=item.total / item.count,
                first_seen=item.first_seen,
                last_seen=item.last_seen,
            )
            for (device, label, units), item in stats.items()
        ]
