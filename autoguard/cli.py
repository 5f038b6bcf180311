"""Command line interface for autoguard."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from pydantic import ValidationError

from autoguard import (
    BehaviorMonitor,
    InMemoryTelemetryProvider,
    Orchestrator,
    RiskScoringEngine,
    build_default_registry,
    load_config,
)
from autoguard.config import AutoguardConfig
from autoguard.errors import AutoguardError, WorkerFailure
from autoguard.security import ActivityEvent

app = typer.Typer(help="CLI for autoguard predictive maintenance")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", help="Logging level for autoguard"),
) -> None:
    """autoguard CLI entry point."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_fleet(fleet: Optional[Path], config: AutoguardConfig) -> InMemoryTelemetryProvider:
    path = fleet or (Path(config.fleet_path) if config.fleet_path else None)
    if path is None:
        typer.secho(
            "No fleet data given. Pass --fleet or set AUTOGUARD_FLEET_PATH",
            fg=typer.colors.RED,
        )
        raise typer.Exit(code=1)
    if not path.exists():
        typer.secho(f"Fleet file does not exist: {path}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    return InMemoryTelemetryProvider.from_file(path)


@app.command()
def orchestrate(
    vehicle_ids: Optional[List[str]] = typer.Argument(
        None, help="Vehicles to run (default: every vehicle in the fleet)"
    ),
    fleet: Optional[Path] = typer.Option(None, help="YAML or JSON fleet document"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file"),
    activity: int = typer.Option(0, help="Print the last N activity events"),
    show_dashboard: bool = typer.Option(
        False, "--dashboard", help="Print the security dashboard afterwards"
    ),
) -> None:
    """
    Run the complete maintenance pipeline for one or more vehicles.

    Vehicles run concurrently; each prints its workflow id, final status and
    summary. Exits with code 1 if any pipeline failed.

    Example:
        autoguard orchestrate V001 V002 --fleet guides/fleet_example.yaml
    """
    config = load_config(str(config_path) if config_path else None)
    provider = _load_fleet(fleet, config)
    orchestrator = Orchestrator(
        registry=build_default_registry(provider, config), config=config
    )
    targets = list(vehicle_ids or provider.list_vehicle_ids())

    async def run_all():
        return await asyncio.gather(
            *(orchestrator.orchestrate(v) for v in targets), return_exceptions=True
        )

    outcomes = asyncio.run(run_all())

    failed = False
    for vehicle_id, outcome in zip(targets, outcomes):
        if isinstance(outcome, WorkerFailure):
            failed = True
            typer.secho(
                f"{vehicle_id}\t{outcome.workflow_id}\tfailed at {outcome.stage}: "
                f"{outcome.original}",
                fg=typer.colors.RED,
            )
        elif isinstance(outcome, BaseException):
            failed = True
            typer.secho(f"{vehicle_id}\terror: {outcome}", fg=typer.colors.RED)
        else:
            typer.echo(f"{vehicle_id}\t{outcome.id}\t{outcome.status.value}")
            typer.echo(outcome.result["summary"])

    if activity > 0:
        typer.echo("\nActivity log:")
        for event in orchestrator.get_activity_log(activity):
            typer.echo(f"{event.timestamp.isoformat()}\t{event.actor}\t{event.action}")

    if show_dashboard:
        typer.echo(orchestrator.monitor.get_security_dashboard().model_dump_json(indent=2))

    if failed:
        raise typer.Exit(code=1)


@app.command()
def predict(
    vehicle_id: str,
    fleet: Optional[Path] = typer.Option(None, help="YAML or JSON fleet document"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file"),
) -> None:
    """Score one vehicle and print the diagnosis as JSON."""
    config = load_config(str(config_path) if config_path else None)
    provider = _load_fleet(fleet, config)
    engine = RiskScoringEngine(config.scoring)
    try:
        result = engine.predict(
            provider.get_vehicle(vehicle_id),
            provider.get_latest_snapshot(vehicle_id),
            provider.get_maintenance_history(vehicle_id),
        )
    except AutoguardError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(result.model_dump_json(indent=2))


@app.command()
def dashboard(
    events: Path = typer.Argument(..., help="YAML or JSON list of activity events"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file"),
    recent: int = typer.Option(10, help="Number of recent anomalies to include"),
) -> None:
    """
    Replay recorded activity events through the behavior monitor.

    Each event needs ``actor`` and ``action``; ``timestamp`` and ``metadata``
    are optional. Prints the resulting security dashboard as JSON.
    """
    if not events.exists():
        typer.secho(f"Events file does not exist: {events}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    config = load_config(str(config_path) if config_path else None)
    with open(events) as f:
        raw = yaml.safe_load(f) or []

    monitor = BehaviorMonitor(config.monitor)
    for index, item in enumerate(raw):
        try:
            event = ActivityEvent.model_validate(item)
        except ValidationError as e:
            typer.secho(f"Invalid event at position {index}: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        monitor.evaluate(event)

    report = monitor.get_security_dashboard(recent=recent)
    typer.echo(report.model_dump_json(indent=2))


if __name__ == "__main__":
    app()
