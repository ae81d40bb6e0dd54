"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import shutil
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from rimsync import __version__
from rimsync.core.sync_manager import SyncManager
from rimsync.exceptions import RimsyncError
from rimsync.models.config import DEFAULT_MANIFEST_NAME, SyncConfig
from rimsync.models.item import ItemPaths
from rimsync.storage.config_manager import ConfigManager
from rimsync.storage.manifest import load_manifest

from .formatters import (
    print_config,
    print_error,
    print_items_table,
    print_summary_panel,
)

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
            markup=True,
        )
    ],
)
log = logging.getLogger("rimsync")

app = typer.Typer(
    name="rimsync",
    help=(
        "Download RimWorld Steam Workshop mods with SteamCMD and copy them into"
        " your mods folder. Use 'rimsync <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

MODS_DIR_HELP = (
    "RimWorld mods folder; must contain the manifest. "
    "Example: .wine/drive_c/Games/RimWorld/Mods/"
)
STEAM_DIR_HELP = (
    "Folder SteamCMD downloads workshop items into. "
    "Example: .local/share/Steam/steamapps/workshop/content/294100/"
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv shows raw SteamCMD output).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """RimWorld Workshop Sync"""
    if version:
        console.print(f"[bold]rimsync[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("rimsync").setLevel(log_level)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _load_config(
    config_file: Path | None, cli_options: dict
) -> SyncConfig:
    return ConfigManager(config_file).load_config(cli_options)


@app.command()
def sync(
    mods_dir: Path = typer.Option(..., "--mods-dir", "-m", help=MODS_DIR_HELP),
    steam_dir: Path = typer.Option(..., "--steam-dir", "-s", help=STEAM_DIR_HELP),
    clean: bool = typer.Option(
        False,
        "--clean",
        "-c",
        help="Redownload all mods, even if they already exist.",
    ),
    manifest: str | None = typer.Option(
        None,
        "--manifest",
        help=f"Name of the mod list inside the mods folder (default {DEFAULT_MANIFEST_NAME}).",
    ),
    steamcmd: str | None = typer.Option(
        None, "--steamcmd", help="SteamCMD executable (default: steamcmd on PATH)."
    ),
    app_id: int | None = typer.Option(
        None, "--app-id", help="Steam app whose workshop hosts the mods."
    ),
    attempts: int | None = typer.Option(
        None, "--attempts", help="Download attempts per mod before giving up."
    ),
    strict_staging: bool | None = typer.Option(
        None,
        "--strict-staging/--lenient-staging",
        help="Fail if SteamCMD's output folder never appears after a download.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would happen without launching SteamCMD or touching files.",
    ),
    config_file: Path | None = typer.Option(
        None, "--config", help="INI file with SteamCMD and timeout settings."
    ),
):
    """Download missing mods and copy them into the mods folder."""
    cli_options = {
        "mods_dir": mods_dir,
        "steam_dir": steam_dir,
        "clean": clean,
        "dry_run": dry_run,
        "manifest_name": manifest,
        "steamcmd_path": steamcmd,
        "app_id": app_id,
        "max_attempts": attempts,
        "strict_staging": strict_staging,
    }

    try:
        config = _load_config(config_file, cli_options)
        if log.isEnabledFor(logging.DEBUG):
            print_config(config, console)

        manager = SyncManager(config)
        stats = asyncio.run(manager.run())
    except RimsyncError as e:
        print_error(e, console)
        raise typer.Exit(code=1) from e

    print_summary_panel(stats, console)


@app.command(name="list")
def list_command(
    mods_dir: Path = typer.Option(..., "--mods-dir", "-m", help=MODS_DIR_HELP),
    steam_dir: Path = typer.Option(..., "--steam-dir", "-s", help=STEAM_DIR_HELP),
    manifest: str | None = typer.Option(
        None, "--manifest", help="Name of the mod list inside the mods folder."
    ),
):
    """Show the mods in the manifest and what is already on disk."""
    try:
        config = _load_config(
            None,
            {"mods_dir": mods_dir, "steam_dir": steam_dir, "manifest_name": manifest},
        )
        items = load_manifest(config.manifest_path)
    except RimsyncError as e:
        print_error(e, console)
        raise typer.Exit(code=1) from e

    paths = [ItemPaths.for_item(item, config.steam_dir, config.mods_dir) for item in items]
    print_items_table(items, paths, console)


@app.command()
def diagnose(
    mods_dir: Path = typer.Option(..., "--mods-dir", "-m", help=MODS_DIR_HELP),
    steam_dir: Path = typer.Option(..., "--steam-dir", "-s", help=STEAM_DIR_HELP),
    manifest: str = typer.Option(
        DEFAULT_MANIFEST_NAME, "--manifest", help="Name of the mod list."
    ),
    steamcmd: str = typer.Option(
        "steamcmd", "--steamcmd", help="SteamCMD executable to look for."
    ),
):
    """Diagnose common setup issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False

    for label, directory in (("Mods folder", mods_dir), ("Steam folder", steam_dir)):
        if directory.is_dir():
            console.print(f"[green]✓[/] {label} exists: [dim]{escape(str(directory))}[/dim]")
        else:
            console.print(f"[red]✗ {label} not found:[/] {escape(str(directory))}")
            issues_found = True

    manifest_path = mods_dir / manifest
    if manifest_path.is_file():
        try:
            items = load_manifest(manifest_path)
            console.print(
                f"[green]✓[/] Manifest lists {len(items)} mods: "
                f"[dim]{escape(str(manifest_path))}[/dim]"
            )
        except RimsyncError as e:
            console.print(f"[red]✗ Manifest is invalid:[/] {escape(str(e))}")
            issues_found = True
    else:
        console.print(f"[red]✗ Manifest not found:[/] {escape(str(manifest_path))}")
        issues_found = True

    if resolved := shutil.which(steamcmd):
        console.print(f"[green]✓[/] SteamCMD found: [dim]{escape(resolved)}[/dim]")
    else:
        console.print(
            f"[red]✗ SteamCMD '{escape(steamcmd)}' not found.[/] "
            "Install it or pass --steamcmd."
        )
        issues_found = True

    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
