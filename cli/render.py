from __future__ import annotations

from typing import Any, Iterable, Sequence

import typer

from models.records import PollResult, SensorReading
from models.schemas import MetricSummary, StoredReading


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_value(value: float, units: str) -> str:
    return f"{value} {units}"


def render_readings(readings: Sequence[SensorReading]) -> None:
    if not readings:
        typer.echo("No readings found.")
        return

    device = None
    for reading in readings:
        if reading.device != device:
            if device is not None:
                typer.echo()
            device = reading.device
            echo_heading(device)
        typer.echo(f"  {reading.label}: {_format_value(reading.value, reading.units)}")


def render_poll_result(result: PollResult) -> None:
    echo_key_values(
        [
            ("datetime", result.timestamp.isoformat()),
            ("reading_count", len(result.readings)),
        ]
    )
    typer.echo()
    render_readings(result.readings)


def render_history(rows: Sequence[StoredReading]) -> None:
    echo_heading("Stored Readings")
    if not rows:
        typer.echo("No stored readings.")
        return
    for row in rows:
        typer.echo(
            f"{row.timestamp.isoformat()}  {row.device}  {row.label}: "
            f"{_format_value(row.value, row.units)}"
        )


def render_summaries(summaries: Sequence[MetricSummary]) -> None:
    echo_heading("Metric Summary")
    if not summaries:
        typer.echo("No stored readings.")
        return
    for summary in summaries:
        typer.echo()
        echo_heading(f"{summary.device} / {summary.label}")
        echo_key_values(
            [
                ("count", summary.count),
                ("min", _format_value(summary.min_value, summary.units)),
                ("max", _format_value(summary.max_value, summary.units)),
                ("mean", _format_value(summary.mean_value, summary.units)),
                ("first_seen", summary.first_seen.isoformat()),
                ("last_seen", summary.last_seen.isoformat()),
            ]
        )
