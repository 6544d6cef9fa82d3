from __future__ import annotations

import typer

from laxdb_pipeline.cli.db import app as db_app
from laxdb_pipeline.cli.pipeline import app as pipeline_app

app = typer.Typer(no_args_is_help=True)
app.add_typer(pipeline_app, name="pipeline")
app.add_typer(db_app, name="db")
