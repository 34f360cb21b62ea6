"""CLI commands for Scribe.

Provides command-line interface using Typer:
- scribe cache ping: Check the cache round trip
- scribe cache invalidate-lists: Drop every cached list page
- scribe cache inspect: Show what a cache key refers to
- scribe db init: Create tables

Usage:
    scribe --help
    scribe cache ping
    scribe cache inspect articles:list:page:1:limit:10:author:all:after:all
"""

import typer

from scribe.cli.cache_cmd import app as cache_app
from scribe.cli.db_cmd import app as db_app

# Main CLI application
app = typer.Typer(
    name="scribe",
    help="Scribe: cache-aside article store",
    no_args_is_help=True,
)

app.add_typer(cache_app, name="cache")
app.add_typer(db_app, name="db")


@app.callback()
def callback() -> None:
    """Scribe: cache-aside article store."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
