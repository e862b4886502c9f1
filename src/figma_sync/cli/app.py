from typing import Annotated

import typer

from figma_sync.cli.db import db_app
from figma_sync.cli.files import delete_file, import_file, sync_file
from figma_sync.cli.query import query_app
from figma_sync.cli.serve import serve_app
from figma_sync.logging_config import setup_logging

app = typer.Typer(
    name="figma-sync",
    help="Figma Sync CLI: import Figma files and query their styles and variables.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...). Defaults to FIGMA_SYNC_LOG_LEVEL."),
    ] = None,
) -> None:
    setup_logging(log_level)


app.command("import")(import_file)
app.command("sync")(sync_file)
app.command("delete")(delete_file)
app.add_typer(query_app, name="query")
app.add_typer(db_app, name="db")
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
