"""CLI commands for the relational store.

Usage:
    scribe db init
    scribe db check
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import typer

from scribe.persistence.db import close_db, health_check, init_db

T = TypeVar("T")

app = typer.Typer(help="Manage the article database")


@app.command("init")
def init() -> None:
    """Create tables if they don't exist (development only)."""
    from rich.console import Console

    asyncio.run(_run(init_db()))
    Console().print("[green]Tables created[/green]")


@app.command("check")
def check() -> None:
    """Check database connectivity."""
    from rich.console import Console

    console = Console()
    if not asyncio.run(_run(health_check())):
        console.print("[red]Database is not reachable[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Database connected[/green]")


async def _run(awaitable: Awaitable[T]) -> T:
    try:
        return await awaitable
    finally:
        await close_db()
