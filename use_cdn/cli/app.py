"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from use_cdn import __version__
from use_cdn.core import UseCDN, get_file_list
from use_cdn.storage.config_loader import DEFAULT_CONFIG_FILE, ConfigLoader
from use_cdn.storage.paths import DEFAULT_DATA_DIR
from use_cdn.utils.overrides import OverrideTable

from .formatters import build_resolved_table

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=False,
        )
    ],
)
log = logging.getLogger("use_cdn")

app = typer.Typer(
    name="use-cdn",
    help=(
        "Fetch package files from CDNs into a local, versioned cache. Use"
        " 'use-cdn <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

CONFIG_OPTION = typer.Option(
    Path(DEFAULT_CONFIG_FILE),
    "--config",
    "-c",
    help="Path to the Python configuration file defining 'config'.",
)
CACHE_DIR_OPTION = typer.Option(
    Path(DEFAULT_DATA_DIR),
    "--cache-dir",
    help="Directory holding the cache.",
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """use-cdn command line"""
    if version:
        console.print(f"[bold]use-cdn[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("use_cdn").setLevel(log_level)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command(name="resolve")
def resolve_command(
    config_path: Path = CONFIG_OPTION,
    cache_dir: Path = CACHE_DIR_OPTION,
):
    """Fetch every configured file into the cache."""
    config = ConfigLoader(config_path).load()
    overrides = OverrideTable.from_env()

    async def _resolve_async() -> list[Path]:
        async with UseCDN(
            config, log, cache_root=cache_dir, overrides=overrides
        ) as use_cdn:
            return await use_cdn.resolve()

    start_time = time.monotonic()
    resolved = asyncio.run(_resolve_async())
    duration = time.monotonic() - start_time

    if resolved:
        console.print(build_resolved_table(cache_dir.resolve() / "cache", resolved))
    console.print(
        f"[green]✓ Resolved {len(resolved)} file(s) in {duration:.2f}s.[/green]"
    )


@app.command(name="files")
def files_command(
    config_path: Path = CONFIG_OPTION,
    cache_dir: Path = CACHE_DIR_OPTION,
):
    """List the cached files of an already resolved configuration."""
    config = ConfigLoader(config_path).load()
    overrides = OverrideTable.from_env()
    for path in get_file_list(config, log, cache_root=cache_dir, overrides=overrides):
        typer.echo(str(path))
