from __future__ import annotations

import typer

from laxdb_pipeline.cli.common import make_engine
from laxdb_pipeline.core.config import settings
from laxdb_pipeline.db import create_tables

app = typer.Typer(help="Local storage helpers.")


@app.command("init")
def init_db_cmd() -> None:
    """Create the pipeline tables if they do not exist."""

    engine = make_engine(settings)
    try:
        create_tables(engine)
    finally:
        engine.dispose()

    typer.echo(f"Tables ready at {engine.url.render_as_string(hide_password=True)}")
