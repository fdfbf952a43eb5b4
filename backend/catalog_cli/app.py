"""Command line interface for the catalog enrichment pipeline."""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict
from typing import Any, Awaitable, Callable, TypeVar

import typer
from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..catalog_api.db import create_engine_from_settings, init_database
from ..catalog_api.settings import CatalogSettings
from ..enrichment.scheduler import PipelineRunner

logger = logging.getLogger(__name__)

T = TypeVar("T")

app = typer.Typer(
    help="Build and refresh the streaming catalog cache.",
    no_args_is_help=True,
    add_completion=False,
)


def build_runner(settings: CatalogSettings, engine: Engine) -> PipelineRunner:
    """Create the pipeline runner used by every command."""

    return PipelineRunner(settings, engine)


def _load_settings() -> CatalogSettings:
    try:
        return CatalogSettings()
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _execute(action: Callable[[PipelineRunner], Awaitable[T] | T]) -> T | None:
    """Initialise the schema, run ``action`` and always dispose of the engine."""

    settings = _load_settings()
    engine: Engine | None = None
    try:
        engine = create_engine_from_settings(settings)
        init_database(engine)
        result = action(build_runner(settings, engine))
        if asyncio.iscoroutine(result):
            result = asyncio.run(result)
        return result
    except SQLAlchemyError as exc:
        typer.echo(f"Catalog store error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        if engine is not None:
            engine.dispose()


def _echo(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Configure logging before any command runs."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("init")
def init_command() -> None:
    """Create the schema and seed the service reference rows."""

    _execute(lambda runner: None)
    typer.echo("Catalog schema ready.")


@app.command("bulk")
def bulk_command() -> None:
    """Import minimal title rows from today's TMDB id exports."""

    report = _execute(lambda runner: runner.bulk())
    _echo({"processed": report.processed, "skipped": report.skipped, "kinds": [asdict(k) for k in report.kinds]})


@app.command("seed")
def seed_command() -> None:
    """Resolve the curated seed lists and mark their titles featured."""

    report = _execute(lambda runner: runner.seed())
    _echo(asdict(report))


@app.command("pipeline")
def pipeline_command() -> None:
    """Run metadata, presence, Watchmode, MOTN, verification and publish."""

    report = _execute(lambda runner: runner.pipeline())
    _echo(asdict(report))


@app.command("pipeline:full")
def pipeline_full_command() -> None:
    """Seed, then run the daily pipeline."""

    report = _execute(lambda runner: runner.pipeline_full())
    _echo(asdict(report))


@app.command("pipeline:verify")
def verify_command() -> None:
    """Probe stored stream URLs only."""

    report = _execute(lambda runner: runner.verify())
    _echo(asdict(report))


@app.command("generate")
def generate_command() -> None:
    """Write the published catalog projection only."""

    count = _execute(lambda runner: runner.publish())
    typer.echo(f"Published {count} titles.")
