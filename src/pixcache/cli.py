"""Click CLI for pixcache — fetch images through the cache and manage it."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pixcache.config.settings import CacheConfig
from pixcache.errors.exceptions import EncodeError
from pixcache.utils.image import encode_png

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelName(default_level)
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


@click.group()
@click.version_option(package_name="pixcache")
def cli() -> None:
    """pixcache — two-tier image cache (memory + disk) with network fallback."""


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.option(
    "--refresh", is_flag=True, default=False, help="Always refetch, even on a cache hit."
)
@click.option("-o", "--output-dir", type=click.Path(), help="Write each image here as PNG.")
@click.option("--cache-dir", type=click.Path(), default=None, help="Override the cache directory.")
@click.option("--workers", type=int, default=None, help="Concurrent fetches.")
@click.option("--timeout", type=float, default=None, help="Network timeout in seconds.")
@click.option(
    "--coalesce", is_flag=True, default=False, help="Share one download between duplicate URLs."
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def fetch(
    urls: tuple[str, ...],
    refresh: bool,
    output_dir: str | None,
    cache_dir: str | None,
    workers: int | None,
    timeout: float | None,
    coalesce: bool,
    verbose: int,
) -> None:
    """Fetch image URL(s) through the cache."""
    from pixcache.core import fetch_images_async
    from pixcache.types import FetchPolicy

    try:
        config = CacheConfig.load(
            cache_dir=cache_dir,
            max_concurrent=workers,
            timeout=timeout,
            coalesce_requests=coalesce or None,
        )
    except ValueError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)
    _setup_logging(verbose, config.log_level)

    policy = FetchPolicy.CACHE_THEN_REFRESH if refresh else FetchPolicy.CACHE_FIRST
    results = asyncio.run(fetch_images_async(list(urls), policy, config=config))

    out_dir = Path(output_dir) if output_dir else None
    if out_dir:
        out_dir.mkdir(parents=True, exist_ok=True)

    table = Table(title="Fetched Images", show_header=True)
    table.add_column("URL", style="cyan", overflow="fold")
    table.add_column("Source")
    table.add_column("Size")
    table.add_column("Saved to")

    failed = 0
    for index, (url, result) in enumerate(zip(urls, results, strict=True), 1):
        if result is None:
            failed += 1
            table.add_row(url, "[red]failed[/red]", "-", "-")
            continue
        saved = "-"
        if out_dir:
            target = out_dir / f"image_{index:03d}.png"
            try:
                target.write_bytes(encode_png(result.image))
                saved = str(target)
            except (EncodeError, OSError) as e:
                saved = "[red]not written[/red]"
                error_console.print(f"[yellow]Could not write {target}:[/yellow] {e}")
        width, height = result.size
        table.add_row(url, result.source.value, f"{width}x{height}", saved)

    console.print(table)
    if failed:
        error_console.print(f"[red]{failed} of {len(urls)} image(s) could not be fetched.[/red]")
        sys.exit(1)


@cli.command("path")
@click.argument("url")
@click.option("--cache-dir", type=click.Path(), default=None, help="Override the cache directory.")
def show_path(url: str, cache_dir: str | None) -> None:
    """Print the disk cache path for URL."""
    from pixcache.cache.disk import DiskStore

    config = CacheConfig.load(cache_dir=cache_dir)
    store = DiskStore(config.cache_dir)
    path = store.path_for(url)
    marker = "[green]cached[/green]" if store.contains(url) else "[yellow]not cached[/yellow]"
    click.echo(str(path))
    error_console.print(marker)


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
@click.option("--cache-dir", type=click.Path(), default=None, help="Override the cache directory.")
def cache_stats(cache_dir: str | None) -> None:
    """Show disk cache statistics."""
    from pixcache.cache.disk import DiskStore

    config = CacheConfig.load(cache_dir=cache_dir)
    store = DiskStore(config.cache_dir)

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    table.add_row("Directory", str(store.cache_dir))
    table.add_row("Entries", str(store.entry_count))
    table.add_row("Size (MB)", f"{store.size_mb:.2f}")

    console.print(table)


@cache.command("clear")
@click.option("--cache-dir", type=click.Path(), default=None, help="Override the cache directory.")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear(cache_dir: str | None) -> None:
    """Delete every file in the disk cache directory."""
    from pixcache.cache.disk import DiskStore

    config = CacheConfig.load(cache_dir=cache_dir)
    removed = DiskStore(config.cache_dir).clear()
    console.print(f"[green]Cache cleared ({removed} entries removed).[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
