from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import typer

from cli.config import SamplerConfig, load_config
from cli.render import (
    render_history,
    render_poll_result,
    render_readings,
    render_summaries,
)
from datastore.sqlite_store import SensorStore, build_default_store
from logging_config import configure_logging
from models.errors import SamplerError
from services.aggregator import Aggregator
from services.parser import SensorOutputParser
from services.sampler import SamplerService, build_default_sampler
from sources.sensors_command import build_default_source

logger = logging.getLogger(__name__)


@dataclass
class CLIState:
    config: SamplerConfig
    store: Optional[SensorStore] = None

    def open_store(self) -> SensorStore:
        if self.store is None:
            self.store = build_default_store(path=str(self.config.database_path))
        return self.store

    def build_sampler(self) -> SamplerService:
        sampler = build_default_sampler(
            sensors_path=str(self.config.sensors_path),
            database_path=str(self.config.database_path),
            interval=self.config.poll_interval,
        )
        self.store = sampler.store
        return sampler

    def close(self) -> None:
        if self.store is not None:
            self.store.close()
            self.store = None
        build_default_sampler.cache_clear()
        build_default_store.cache_clear()
        build_default_source.cache_clear()


app = typer.Typer(
    help="Periodically record lm-sensors readings into a SQLite database.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _positive_interval(value: Optional[float]) -> Optional[float]:
    if value is not None and value <= 0:
        raise typer.BadParameter("Poll interval must be greater than zero.")
    return value


@contextmanager
def _fatal_errors() -> Iterator[None]:
    try:
        yield
    except SamplerError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    sensors_path: Optional[Path] = typer.Option(
        None,
        "--sensors-path",
        "-s",
        help="Path to the sensors binary (defaults to SENSORS_PATH env or /usr/bin/sensors).",
    ),
    database_path: Optional[Path] = typer.Option(
        None,
        "--database-path",
        "-d",
        help="Path to the SQLite database file (defaults to SENSORS_DATABASE_PATH env or sensors.db).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        "-p",
        callback=_positive_interval,
        help="Seconds between polls (defaults to SENSORS_POLL_INTERVAL env or 5).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(
        sensors_path=sensors_path,
        database_path=database_path,
        poll_interval=poll_interval,
        log_level=log_level,
    )
    configure_logging(config.log_level)
    state = CLIState(config=config)
    ctx.obj = state
    ctx.call_on_close(state.close)


@app.command("run")
def run_command(
    ctx: typer.Context,
    cycles: Optional[int] = typer.Option(
        None,
        "--cycles",
        min=1,
        help="Stop after this many poll cycles instead of running forever.",
    ),
) -> None:
    """Poll the sensors forever and append every reading to the database."""
    state = _get_state(ctx)
    with _fatal_errors():
        sampler = state.build_sampler()
        try:
            completed = sampler.run(max_cycles=cycles)
        except KeyboardInterrupt:
            logger.info("Sampler interrupted, shutting down")
            typer.secho("Interrupted.", err=True)
            raise typer.Exit(code=130)
    typer.echo(f"Completed {completed} poll cycle(s).")


@app.command("once")
def once_command(ctx: typer.Context) -> None:
    """Run a single poll cycle and show what was stored."""
    state = _get_state(ctx)
    with _fatal_errors():
        result = state.build_sampler().poll_once()
    render_poll_result(result)


@app.command("parse")
def parse_command(
    file: Optional[Path] = typer.Argument(
        None,
        exists=True,
        dir_okay=False,
        readable=True,
        help="File with captured sensors output; reads stdin when omitted.",
    ),
) -> None:
    """Parse captured sensors output without touching the database."""
    if file is None:
        source_name = "standard input"
        data = typer.get_binary_stream("stdin").read()
    else:
        source_name = str(file)
        data = file.read_bytes()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise typer.BadParameter(f"{source_name} is not valid UTF-8.") from exc
    with _fatal_errors():
        readings = SensorOutputParser().parse(text)
    render_readings(readings)


@app.command("history")
def history_command(
    ctx: typer.Context,
    device: Optional[str] = typer.Option(None, "--device", help="Only show this device."),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=1, help="Show only the most recent rows."
    ),
) -> None:
    """Show readings stored in the database."""
    state = _get_state(ctx)
    with _fatal_errors():
        rows = state.open_store().scan(device=device, limit=limit)
    render_history(rows)


@app.command("summary")
def summary_command(
    ctx: typer.Context,
    device: Optional[str] = typer.Option(None, "--device", help="Only summarize this device."),
) -> None:
    """Show per-metric statistics over the stored readings."""
    state = _get_state(ctx)
    with _fatal_errors():
        rows = state.open_store().scan(device=device)
    render_summaries(Aggregator().summarize(rows))
