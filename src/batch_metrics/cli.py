"""Typer CLI commands for inspecting job metrics state."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich import print as rprint
from rich.markup import escape

from .config import AppConfig, ConfigurationError, load_config
from .exporter import SinkUnreachable
from .factory import create_context_store, create_exporter
from .logging_setup import configure_logging, get_logger
from .registry import GaugeSummary, MetricRegistry

app = typer.Typer(name="batch-metrics", help="Job metrics context and export commands")
logger = get_logger(__name__)


def _initialise(config_path: Path) -> AppConfig:
    try:
        config = load_config(config_path)
    except ConfigurationError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=2) from exc
    configure_logging(config.logging.model_dump())
    return config


def _jsonable(value: object) -> object:
    if isinstance(value, GaugeSummary):
        return value.as_dict()
    return value


@app.command()
def contexts(config: Path = typer.Option(..., exists=True, help="Path to YAML configuration")) -> None:
    """List job instances that have a persisted execution context."""

    settings = _initialise(config)
    keys = create_context_store(settings).instance_keys()
    if not keys:
        rprint("[yellow]No execution contexts stored[/yellow]")
        return
    for key in keys:
        rprint(key)


@app.command()
def show(
    instance: str = typer.Option(..., help="Job instance key to display"),
    config: Path = typer.Option(..., exists=True, help="Path to YAML configuration"),
) -> None:
    """Print the persisted execution context of a job instance."""

    settings = _initialise(config)
    context = create_context_store(settings).load(instance)
    if not len(context):
        rprint(f"[yellow]No execution context stored for {instance}[/yellow]")
        return
    summary = {key: _jsonable(value) for key, value in context.to_dict().items()}
    rprint(escape(json.dumps(summary, indent=2, sort_keys=True)))


@app.command()
def clear(
    instance: str = typer.Option(..., help="Job instance key to clear"),
    config: Path = typer.Option(..., exists=True, help="Path to YAML configuration"),
) -> None:
    """Delete the persisted execution context of a job instance."""

    settings = _initialise(config)
    deleted = create_context_store(settings).clear(instance)
    rprint(f"[green]Removed {deleted} entries for {instance}[/green]")


@app.command()
def ping(config: Path = typer.Option(..., exists=True, help="Path to YAML configuration")) -> None:
    """Check that the configured InfluxDB sink answers the handshake."""

    settings = _initialise(config)
    try:
        exporter = create_exporter(settings, MetricRegistry())
    except SinkUnreachable as exc:
        logger.error("cli.ping.failed", error=str(exc))
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    exporter.close()
    rprint(f"[green]InfluxDB reachable at {exporter.base_url}[/green]")
