from __future__ import annotations

import logging
from datetime import UTC, datetime

import typer

from laxdb_pipeline.cli.common import (
    cache_invalidator,
    make_engine,
    orchestrator_config,
)
from laxdb_pipeline.core.config import MissingSettingError, settings
from laxdb_pipeline.core.logging import configure_logging
from laxdb_pipeline.db import create_session_factory
from laxdb_pipeline.ingestion.extractors import build_default_registry
from laxdb_pipeline.ingestion.leagues import build_source_table
from laxdb_pipeline.ingestion.seasons import active_sources, calendar_date
from laxdb_pipeline.pipeline.cache import CacheInvalidationError
from laxdb_pipeline.pipeline.loader import SqlRecordLoader
from laxdb_pipeline.pipeline.orchestrator import PipelineConfigError, PipelineOrchestrator

logger = logging.getLogger(__name__)

app = typer.Typer(help="Scheduled league extraction.")


@app.command("run")
def run_cmd(
    sources: list[str] | None = typer.Option(
        None,
        "--source",
        help="Run only this source code, ignoring its season window. Repeatable.",
    ),
) -> None:
    """Extract, load and invalidate every in-season league (the hourly cron entry point)."""

    configure_logging(settings.log_level)

    engine = make_engine(settings)
    try:
        with cache_invalidator(settings) as invalidator:
            orchestrator = PipelineOrchestrator(
                sources=build_source_table(),
                extractors=build_default_registry(settings),
                loader=SqlRecordLoader(create_session_factory(engine)),
                invalidator=invalidator,
                config=orchestrator_config(settings),
            )
            try:
                summary = orchestrator.run(only=sources or None)
            except PipelineConfigError as e:
                typer.echo(f"Pipeline aborted: {e}", err=True)
                raise typer.Exit(code=1) from e
    except MissingSettingError as e:
        logger.error("[Cron] Aborting run: %s", e)
        typer.echo(f"Pipeline aborted: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        engine.dispose()

    typer.echo(
        " ".join(
            [
                f"Run finished in {summary.duration_seconds:.1f}s:",
                f"active={','.join(summary.active_sources) or '-'}",
                f"succeeded={','.join(summary.succeeded) or '-'}",
                f"failed={','.join(summary.failed) or '-'}",
                f"timed_out={','.join(summary.timed_out) or '-'}",
                f"skipped={','.join(summary.skipped) or '-'}",
            ]
        )
    )


@app.command("active-sources")
def active_sources_cmd(
    on: datetime | None = typer.Option(
        None,
        "--date",
        formats=["%Y-%m-%d"],
        help="Calendar date to check (defaults to today in PIPELINE_TIMEZONE).",
    ),
) -> None:
    """Print the league codes that are in season on a date."""

    tz = orchestrator_config(settings).timezone
    day = on.date() if on is not None else calendar_date(datetime.now(tz=UTC), tz)
    active = active_sources(day, build_source_table().values())

    typer.echo(f"{day.isoformat()}: {' '.join(s.code for s in active) or '(none)'}")


@app.command("invalidate")
def invalidate_cmd(
    source: str = typer.Option(..., "--source", help="Source code whose caches to drop (e.g. PLL)."),
) -> None:
    """Drop the cached leaderboard/players/teams views for a source."""

    configure_logging(settings.log_level)

    if source not in build_source_table():
        typer.echo(f"Unknown source: {source}", err=True)
        raise typer.Exit(code=2)

    try:
        with cache_invalidator(settings) as invalidator:
            keys = invalidator.invalidate(source)
    except (CacheInvalidationError, MissingSettingError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Invalidated {len(keys)} keys: {' '.join(str(k) for k in keys)}")
