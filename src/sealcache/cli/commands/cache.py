# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache CLI commands.

Values are exchanged as JSON: ``set`` parses its VALUE argument as JSON
(falling back to a plain string) and ``get`` prints the stored value as
JSON.

The default ``memory`` driver lives only as long as the process, so each
invocation starts empty.  Point ``SEALCACHE_DRIVER`` at ``redis`` to keep
records between invocations.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

import typer

from sealcache.core.exceptions import SealCacheError

app = typer.Typer()

_ABSENT = object()


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _warn_if_ephemeral(cache: Any) -> None:
    from sealcache.drivers.memory import MemoryDriver

    if isinstance(cache.driver, MemoryDriver):
        typer.echo(
            "Note: the memory driver does not outlive this command; "
            "set SEALCACHE_DRIVER=redis to keep records between invocations.",
            err=True,
        )


def _fail(exc: Exception) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(1) from None


@app.command()
def get(
    key: Annotated[str, typer.Argument(help="User key to look up")],
) -> None:
    """Print the value stored under KEY (exit code 1 on a miss)."""
    from sealcache.cache.manager import get_cache

    try:
        value = get_cache().get(key, _ABSENT)
    except SealCacheError as exc:
        _fail(exc)
    if value is _ABSENT:
        typer.echo(f"No value cached for {key!r}.", err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(value, ensure_ascii=False))


@app.command(name="set")
def set_(
    key: Annotated[str, typer.Argument(help="User key to store under")],
    value: Annotated[str, typer.Argument(help="Value (JSON, or a plain string)")],
    ttl: Annotated[
        str | None,
        typer.Option("--ttl", "-t", help="Seconds, UNIX timestamp, or date string"),
    ] = None,
) -> None:
    """Store VALUE under KEY."""
    from sealcache.cache.manager import get_cache

    cache = get_cache()
    try:
        stored = cache.set(key, _parse_value(value), ttl)
    except SealCacheError as exc:
        _fail(exc)
    _warn_if_ephemeral(cache)
    if not stored:
        typer.echo(f"Failed to store {key!r}.", err=True)
        raise typer.Exit(1)
    typer.echo(f"Stored {key!r}.")


@app.command()
def delete(
    key: Annotated[str, typer.Argument(help="User key to remove")],
) -> None:
    """Remove KEY from the cache."""
    from sealcache.cache.manager import get_cache

    try:
        deleted = get_cache().delete(key)
    except SealCacheError as exc:
        _fail(exc)
    if not deleted:
        typer.echo(f"Failed to delete {key!r}.", err=True)
        raise typer.Exit(1)
    typer.echo(f"Deleted {key!r}.")


@app.command()
def has(
    key: Annotated[str, typer.Argument(help="User key to check")],
) -> None:
    """Print whether KEY is present (exit code 1 when absent)."""
    from sealcache.cache.manager import get_cache

    try:
        present = get_cache().has(key)
    except SealCacheError as exc:
        _fail(exc)
    typer.echo("yes" if present else "no")
    if not present:
        raise typer.Exit(1)


@app.command()
def clear(
    all_prefixes: Annotated[
        bool,
        typer.Option("--all", help="Remove records under every prefix"),
    ] = False,
) -> None:
    """Remove every record under the configured key prefix."""
    from sealcache.cache.manager import get_cache

    cache = get_cache()
    cleared = cache.clear_all() if all_prefixes else cache.clear()
    if not cleared:
        typer.echo("Failed to clear the cache.", err=True)
        raise typer.Exit(1)
    scope = "all prefixes" if all_prefixes else cache.config.key_prefix
    typer.echo(f"Cache cleared ({scope}).")


@app.command()
def stats() -> None:
    """Show cache hit/miss counts for this process."""
    from rich.console import Console
    from rich.table import Table

    from sealcache.cache.manager import get_cache

    cache = get_cache()
    st = cache.stats

    console = Console()
    table = Table(title="Cache Statistics")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Hits", str(st.hits))
    table.add_row("Misses", str(st.misses))
    table.add_row("Total Requests", str(st.total))
    table.add_row("Hit Rate", f"{st.hit_rate:.2%}")
    table.add_row("Writes", str(st.writes))
    table.add_row("Write Failures", str(st.write_failures))
    table.add_row("Decrypt Failures", str(st.decrypt_failures))
    table.add_row("Encryption", str(cache.cipher) if cache.encryption_enabled else "off")

    console.print(table)
