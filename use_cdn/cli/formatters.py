"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "CacheUnreadableError": [
            "• The cache directory does not look like a use-cdn cache.",
            "• Move it somewhere else or delete it, then run again.",
        ],
        "UnsupportedCacheVersionError": [
            "• The cache was written by a newer release of use-cdn.",
            "• Upgrade use-cdn, or delete the cache directory.",
        ],
        "CacheMissError": [
            "• Run `use-cdn resolve` before listing files.",
            "• Make sure USE_CDN_OVERRIDES is the same as when resolving.",
        ],
        "ConfigurationError": [
            "• Check the configuration file for typos.",
            "• Resolver names must not be CDN names; use \"native\" instead.",
        ],
        "UnsupportedCDNError": [
            "• Supported CDNs are: unpkg, cdnjs.",
        ],
        "UnsupportedResolverError": [
            "• Supported resolvers are: npm and null.",
            "• \"native\" selects the resolver of CDNs that have one (unpkg).",
        ],
        "ResolutionError": [
            "• Check the package name and the version or tag requested.",
            "• The registry or CDN may have answered unexpectedly; retry later.",
        ],
        "NetworkError": [
            "• A network connection issue occurred.",
            "• The CDN or registry might be temporarily unavailable.",
            "• Please try again in a few minutes.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def build_resolved_table(cache_base: Path, resolved: list[Path]) -> Table:
    """Builds a table listing resolved files relative to the cache."""
    table = Table(title="Resolved Files", box=box.ROUNDED, show_lines=False)
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("File")

    for path in resolved:
        try:
            package, version, *rest = path.relative_to(cache_base).parts
        except ValueError:
            table.add_row("?", "?", str(path))
            continue
        table.add_row(package, version, "/".join(rest))

    return table
