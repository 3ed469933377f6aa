"""Unit tests for the aggregation logic."""

from __future__ import annotations

from datetime import datetime, timezone

from models.schemas import StoredReading
from services.aggregator import Aggregator


def _row(label: str, value: float, second: int, device: str = "coretemp-isa-0000") -> StoredReading:
    """Helper to build deterministic stored rows."""

    return StoredReading(
        timestamp=datetime(2024, 1, 1, 0, 0, second, tzinfo=timezone.utc),
        device=device,
        label=label,
        value=value,
        units="°C",
    )


def test_summarize_empty_iterable_returns_no_summaries() -> None:
    assert Aggregator().summarize([]) == []


def test_summarize_computes_statistics_per_metric() -> None:
    rows = [
        _row("Core 0", 40.0, 0),
        _row("Core 1", 50.0, 0),
        _row("Core 0", 44.0, 5),
        _row("Core 0", 42.0, 10),
    ]

    summaries = Aggregator().summarize(rows)

    assert [(s.device, s.label) for s in summaries] == [
        ("coretemp-isa-0000", "Core 0"),
        ("coretemp-isa-0000", "Core 1"),
    ]
    core0 = summaries[0]
    assert core0.count == 3
    assert core0.min_value == 40.0
    assert core0.max_value == 44.0
    assert core0.mean_value == 42.0
    assert core0.first_seen == datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
    assert core0.last_seen == datetime(2024, 1, 1, 0, 0, 10, tzinfo=timezone.utc)
    assert summaries[1].count == 1


def test_same_label_on_different_devices_is_kept_apart() -> None:
    rows = [
        _row("temp1", 30.0, 0, device="acpitz-virtual-0"),
        _row("temp1", 60.0, 0, device="nvme-pci-0100"),
    ]

    summaries = Aggregator().summarize(rows)

    assert [(s.device, s.mean_value) for s in summaries] == [
        ("acpitz-virtual-0", 30.0),
        ("nvme-pci-0100", 60.0),
    ]
