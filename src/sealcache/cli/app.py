# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import time
from typing import Annotated

import typer

from sealcache.cli.commands import cache as cache_cmd

app = typer.Typer(
    name="sealcache",
    help="Key-normalizing, optionally encrypting cache toolkit",
    no_args_is_help=True,
)

app.add_typer(
    cache_cmd.app,
    name="cache",
    help=(
        "Operate on the configured cache driver. The default memory driver is "
        "per-process, so use SEALCACHE_DRIVER=redis to share records between commands."
    ),
)


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Override SEALCACHE_LOG_LEVEL"),
    ] = None,
) -> None:
    """Configure logging from settings before any command runs."""
    from sealcache.core.config import get_settings
    from sealcache.core.logging import setup_logging

    settings = get_settings()
    setup_logging(log_level or settings.log_level, settings.log_format)


@app.command()
def keygen() -> None:
    """Print a new random 32-byte secret key as hex."""
    from sealcache.cache.crypto import generate_secret_key

    typer.echo(generate_secret_key().hex())


@app.command(name="real-key")
def real_key(
    key: Annotated[str, typer.Argument(help="User key to derive")],
) -> None:
    """Print the internal key the driver sees for KEY."""
    from sealcache.cache.keys import derive_key
    from sealcache.core.config import get_settings
    from sealcache.core.exceptions import SealCacheError

    try:
        typer.echo(derive_key(key, get_settings().to_cache_config()))
    except SealCacheError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from None


@app.command()
def ttl(
    spec: Annotated[
        str,
        typer.Argument(
            help=(
                "Seconds, UNIX timestamp, or a date string such as '+1 week'. "
                "Put -- before values that start with a dash, e.g. ttl -- '-1 week'."
            )
        ),
    ],
) -> None:
    """Print the seconds-to-live SPEC normalizes to.

    Values starting with a dash must follow ``--``: ``sealcache ttl -- "-1 week"``.
    """
    from sealcache.cache.ttl import coerce_ttl, normalize
    from sealcache.core.config import get_settings
    from sealcache.core.exceptions import SealCacheError

    settings = get_settings()
    try:
        seconds = normalize(
            coerce_ttl(spec, strict=False),
            int(time.time()),
            settings.default_ttl,
        )
    except SealCacheError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from None
    typer.echo(str(seconds))


@app.command()
def probe() -> None:
    """Print the AEAD cipher this process would select."""
    from sealcache.cache.crypto import resolve_cipher
    from sealcache.core.config import get_settings
    from sealcache.core.exceptions import SealCacheError

    try:
        cipher = resolve_cipher(get_settings().cipher)
    except SealCacheError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from None
    typer.echo(str(cipher))


@app.command()
def version() -> None:
    """Show version information."""
    from sealcache import __version__

    typer.echo(f"sealcache v{__version__}")
