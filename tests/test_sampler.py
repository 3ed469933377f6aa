from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator, List

import pytest

from datastore.sqlite_store import SensorStore
from models.errors import SensorSourceError, StoreError
from services.sampler import SamplerService

SAMPLE_OUTPUT = """acpitz-virtual-0
temp1:        +27.8°C  (crit = +105.0°C)

coretemp-isa-0000
Package id 0:  +45.0°C  (high = +80.0°C, crit = +100.0°C)
Core 0:        +43.0°C  (high = +80.0°C, crit = +100.0°C)
"""


class StubSource:
    def __init__(self, outputs: List[str]) -> None:
        self.outputs = list(outputs)
        self.calls = 0

    def read(self) -> str:
        self.calls += 1
        if not self.outputs:
            raise SensorSourceError("sensors binary exited with status 1")
        return self.outputs.pop(0)


class FakeClock:
    def __init__(self) -> None:
        self.current = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        stamp = self.current
        self.current += timedelta(seconds=5)
        return stamp


@pytest.fixture()
def store(tmp_path: Path) -> Iterator[SensorStore]:
    store = SensorStore(tmp_path / "sensors.db")
    yield store
    store.close()


def test_poll_once_stores_batch_with_shared_timestamp(store: SensorStore) -> None:
    clock = FakeClock()
    sampler = SamplerService(source=StubSource([SAMPLE_OUTPUT]), store=store, clock=clock)

    result = sampler.poll_once()

    assert result.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert [reading.label for reading in result.readings] == ["temp1", "Package id 0", "Core 0"]
    rows = store.scan()
    assert [(row.device, row.label, row.value) for row in rows] == [
        ("acpitz-virtual-0", "temp1", 27.8),
        ("coretemp-isa-0000", "Package id 0", 45.0),
        ("coretemp-isa-0000", "Core 0", 43.0),
    ]
    assert {row.timestamp for row in rows} == {result.timestamp}


def test_run_sleeps_between_bounded_cycles(store: SensorStore) -> None:
    sleeps: List[float] = []
    source = StubSource([SAMPLE_OUTPUT, SAMPLE_OUTPUT, SAMPLE_OUTPUT])
    sampler = SamplerService(
        source=source,
        store=store,
        interval=2.5,
        clock=FakeClock(),
        sleep=sleeps.append,
    )

    completed = sampler.run(max_cycles=3)

    assert completed == 3
    assert source.calls == 3
    assert sleeps == [2.5, 2.5]
    timestamps = sorted({row.timestamp for row in store.scan()})
    assert len(timestamps) == 3
    assert len(store.scan()) == 9


def test_run_stops_on_source_failure(store: SensorStore) -> None:
    sleeps: List[float] = []
    sampler = SamplerService(
        source=StubSource([SAMPLE_OUTPUT]),
        store=store,
        clock=FakeClock(),
        sleep=sleeps.append,
    )

    with pytest.raises(SensorSourceError):
        sampler.run()

    assert len(store.scan()) == 3
    assert sleeps == [5.0]


def test_store_failure_propagates(store: SensorStore) -> None:
    sampler = SamplerService(source=StubSource([SAMPLE_OUTPUT]), store=store)
    store.close()

    with pytest.raises(StoreError):
        sampler.poll_once()


def test_empty_output_still_completes_cycle(store: SensorStore) -> None:
    sampler = SamplerService(source=StubSource([""]), store=store, clock=FakeClock())

    result = sampler.poll_once()

    assert result.readings == ()
    assert store.scan() == []


def test_non_positive_interval_is_rejected(store: SensorStore) -> None:
    with pytest.raises(ValueError):
        SamplerService(source=StubSource([]), store=store, interval=0)


def test_cycle_is_logged_with_context(store: SensorStore, caplog) -> None:
    sampler = SamplerService(source=StubSource([SAMPLE_OUTPUT]), store=store, clock=FakeClock())

    with caplog.at_level(logging.INFO, logger="services.sampler"):
        sampler.poll_once()

    records = [record for record in caplog.records if record.name == "services.sampler"]
    assert records
    assert getattr(records[-1], "cycle") == 1
    assert getattr(records[-1], "reading_count") == 3
