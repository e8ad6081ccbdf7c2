"""
Main entry point for the use-cdn application.
This module handles top-level exception handling and CLI invocation.
"""

import asyncio
import logging
import sys

import typer
from rich.console import Console

from use_cdn.cli.app import app
from use_cdn.cli.formatters import format_error_with_suggestions
from use_cdn.exceptions import CacheMissError, UseCDNError


def main() -> None:
    """Main entry point function."""
    log = logging.getLogger("use_cdn")
    console = Console(stderr=True)

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
        sys.exit(0)
    except CacheMissError as e:
        # `files` output is consumed by scripts; keep the hint on one plain line.
        typer.echo(f"use-cdn: {e}; run `use-cdn resolve` first", err=True)
        sys.exit(1)
    except UseCDNError as e:
        console.print(f"\n{format_error_with_suggestions(e)}")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
