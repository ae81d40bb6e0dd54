"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rimsync.models.config import SyncConfig
from rimsync.models.item import ItemPaths, WorkshopItem
from rimsync.models.stats import SyncStats
from rimsync.utils.formatting import format_duration, pluralize
from rimsync.utils.path import dir_has_entries


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigError": [
            "• Check that --mods-dir and --steam-dir point to existing folders.",
            "• The manifest (mods.txt by default) must be inside the mods folder.",
        ],
        "ManifestFormatError": [
            "• Every line must look like: <workshop url with ?id=NUMBER> <mod name>",
            "• Lines starting with '#' are treated as comments.",
        ],
        "ProcessLaunchError": [
            "• Make sure SteamCMD is installed and on your PATH.",
            "• Or point to it explicitly with --steamcmd /path/to/steamcmd.",
        ],
        "LoginFailedError": [
            "• SteamCMD quit during login. Run it by hand once to let it update.",
            "• Check your internet connection.",
        ],
        "ProtocolTimeoutError": [
            "• SteamCMD stopped responding. Steam may be down or slow.",
            "• Raise login_timeout / download_timeout in the config file.",
        ],
        "DownloadFailedError": [
            "• The item may have been removed from the Workshop.",
            "• Check the mod URL in the manifest.",
            "• Re-run later; mods already placed are kept.",
        ],
        "StagingNotReadyError": [
            "• SteamCMD reported success but its output folder never appeared.",
            "• Check that --steam-dir matches SteamCMD's workshop content folder.",
        ],
        "PlacementError": [
            "• Check permissions and free space in the mods and steam folders.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_error(
    error: Exception, console: Console, context: dict | None = None
):
    """Prints the error panel for a failure that ends the command."""
    console.print()
    console.print(format_error_with_suggestions(error, context))


def print_config(config: SyncConfig, console: Console | None = None):
    """Displays the effective settings for a run."""
    console = console or Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Mods Folder:", f"[dim]{escape(str(config.mods_dir))}[/dim]")
    table.add_row("Steam Folder:", f"[dim]{escape(str(config.steam_dir))}[/dim]")
    table.add_row("Manifest:", escape(config.manifest_name))
    table.add_row("SteamCMD:", escape(config.steamcmd_path))
    table.add_row("App ID:", str(config.app_id))
    table.add_row("Attempts:", str(config.max_attempts))
    table.add_row("Clean:", "✓ Enabled" if config.clean else "✗ Disabled")
    if config.dry_run:
        table.add_row("Dry Run:", "[yellow]✓ Enabled[/yellow]")

    console.print(
        Panel(table, title="[bold cyan]Sync Settings[/bold cyan]", border_style="cyan")
    )


def print_items_table(
    items: list[WorkshopItem],
    paths: list[ItemPaths],
    console: Console | None = None,
):
    """Lists manifest items with the state of their folders."""
    console = console or Console()
    table = Table(title=f"{pluralize(len(items), 'mod')} in manifest", box=box.ROUNDED)
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Mods Folder", justify="center")
    table.add_column("Steam Folder", justify="center")

    for i, (item, item_paths) in enumerate(zip(items, paths, strict=True), 1):
        table.add_row(
            str(i),
            str(item.item_id),
            escape(item.name),
            _state_cell(item_paths.destination_path),
            _state_cell(item_paths.staging_path),
        )

    console.print(table)


def _state_cell(path: Path) -> str:
    if dir_has_entries(path):
        return "[green]✓[/green]"
    return "[dim]✗[/dim]"


def print_summary_panel(stats: SyncStats, console: Console | None = None):
    """Displays the final summary of a sync run."""
    console = console or Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row("Mods in Manifest:", str(stats.items_total))
    stats_table.add_row(
        "✓ Downloaded:", f"[bold green]{stats.items_downloaded}[/bold green]"
    )
    if stats.items_copied_from_staging > 0:
        stats_table.add_row(
            "↻ From Steam Folder:",
            f"[green]{stats.items_copied_from_staging}[/green]",
        )
    if stats.items_skipped_exists > 0:
        stats_table.add_row(
            "○ Skipped:", f"[yellow]{stats.items_skipped_exists} (exists)[/yellow]"
        )
    if stats.dirs_removed > 0:
        stats_table.add_row("✗ Removed (clean):", f"[red]{stats.dirs_removed}[/red]")

    if stats.download_attempts > 0:
        stats_table.add_row("", "")  # Spacer
        stats_table.add_row("SteamCMD Requests:", str(stats.download_attempts))
        if stats.download_failures > 0:
            stats_table.add_row(
                "Failed Requests:", f"[red]{stats.download_failures}[/red]"
            )

    stats_table.add_row(
        "Time Elapsed:", f"[blue]{format_duration(stats.elapsed_seconds)}[/blue]"
    )

    if stats.dry_run:
        title = "🔍 [bold]Dry Run Summary[/bold]"
        border_color = "yellow"
    else:
        title = "📦 [bold]Sync Complete![/bold]"
        border_color = "green"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
