"""CLI commands for the article cache.

Usage:
    scribe cache ping
    scribe cache invalidate-lists
    scribe cache inspect article:42
"""

from __future__ import annotations

import asyncio

import typer

from scribe.cache.invalidation import ArticleCacheInvalidator, InvalidationReport
from scribe.cache.keys import CacheKeys
from scribe.cache.redis import RedisCacheStore, close_redis, get_redis
from scribe.errors import CacheUnavailableError
from scribe.runtime import probe

app = typer.Typer(help="Inspect and maintain the article cache")


@app.command("ping")
def ping() -> None:
    """Write and read back a probe key."""
    from rich.console import Console

    console = Console()
    try:
        ok = asyncio.run(_ping())
    except CacheUnavailableError as e:
        console.print(f"[red]Redis connection failed:[/red] {e}")
        raise typer.Exit(code=1) from e

    if not ok:
        console.print("[red]Probe value did not round-trip[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Redis cache connected[/green]")


async def _ping() -> bool:
    try:
        return await probe(RedisCacheStore(await get_redis()))
    finally:
        await close_redis()


@app.command("invalidate-lists")
def invalidate_lists() -> None:
    """Delete every cached article list page."""
    from rich.console import Console

    console = Console()
    report = asyncio.run(_invalidate_lists())

    console.print(f"[green]Deleted:[/green] {len(report.deleted)} keys")
    if not report.complete:
        console.print(
            f"[red]Failed:[/red] {len(report.failed)} keys, "
            f"{len(report.failed_patterns)} patterns"
        )
        raise typer.Exit(code=1)


async def _invalidate_lists() -> InvalidationReport:
    try:
        invalidator = ArticleCacheInvalidator(RedisCacheStore(await get_redis()))
        return await invalidator.invalidate_all_lists()
    finally:
        await close_redis()


@app.command("inspect")
def inspect(
    key: str = typer.Argument(..., help="Cache key to inspect"),
) -> None:
    """Show the parsed fields of a key and whether it is cached."""
    from rich.console import Console
    from rich.table import Table

    console = Console()
    parsed = CacheKeys.parse_key(key)
    if parsed is None:
        console.print(f"[yellow]Not an article cache key:[/yellow] {key}")
        raise typer.Exit(code=1)

    table = Table(title=key)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for name, value in parsed.items():
        table.add_row(name, value)
    console.print(table)

    try:
        cached = asyncio.run(_exists(key))
    except CacheUnavailableError as e:
        console.print(f"[red]Redis connection failed:[/red] {e}")
        raise typer.Exit(code=1) from e
    state = "[green]cached[/green]" if cached else "[yellow]absent[/yellow]"
    console.print(f"State: {state}")


async def _exists(key: str) -> bool:
    try:
        return await RedisCacheStore(await get_redis()).exists(key)
    finally:
        await close_redis()
