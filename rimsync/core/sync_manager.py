"""
The main orchestrator: walks the manifest and makes sure every mod ends up in the
mods folder, downloading through SteamCMD only when nothing usable is on disk.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from rich.markup import escape

from rimsync.client.protocol import WorkshopProtocol, download_item, login
from rimsync.client.session import SteamCmdSession
from rimsync.models.config import SyncConfig
from rimsync.models.item import ItemPaths, WorkshopItem
from rimsync.models.stats import SyncStats
from rimsync.storage.manifest import load_manifest
from rimsync.utils.path import copy_contents, create_dir, dir_has_entries, remove_dir

from .readiness import wait_for_directory

log = logging.getLogger(__name__)


class ItemAction(Enum):
    """What a run does with one manifest item."""

    SKIP = "skip"  # Mods folder already has it
    COPY_STAGED = "copy_staged"  # SteamCMD downloaded it on an earlier run
    DOWNLOAD = "download"


@dataclass(frozen=True)
class ItemPlan:
    action: ItemAction
    remove_destination: bool = False
    remove_staging: bool = False


class SyncManager:
    """Orchestrates a whole sync run over one SteamCMD session."""

    def __init__(
        self,
        config: SyncConfig,
        session_factory: Callable[[], SteamCmdSession] | None = None,
    ):
        self.config = config
        self.stats = SyncStats(dry_run=config.dry_run)
        self._session_factory = session_factory or (
            lambda: SteamCmdSession(config.steamcmd_path)
        )
        self._session: SteamCmdSession | None = None
        self._protocol: WorkshopProtocol | None = None

    def paths_for(self, item: WorkshopItem) -> ItemPaths:
        return ItemPaths.for_item(item, self.config.steam_dir, self.config.mods_dir)

    def plan(self, paths: ItemPaths) -> ItemPlan:
        """
        Decides what to do with an item from the state of its two directories.

        A non-empty directory is the only signal that an earlier run finished
        with it. With `clean`, any existing directory is removed instead.
        """
        remove_destination = False
        if self.config.clean and paths.destination_path.is_dir():
            remove_destination = True
        elif dir_has_entries(paths.destination_path):
            return ItemPlan(ItemAction.SKIP)

        if self.config.clean and paths.staging_path.is_dir():
            return ItemPlan(
                ItemAction.DOWNLOAD,
                remove_destination=remove_destination,
                remove_staging=True,
            )
        if dir_has_entries(paths.staging_path):
            return ItemPlan(
                ItemAction.COPY_STAGED, remove_destination=remove_destination
            )
        return ItemPlan(ItemAction.DOWNLOAD, remove_destination=remove_destination)

    async def run(self) -> SyncStats:
        """
        Processes every manifest item in order.

        Any error other than a retried download failure aborts the run; items
        placed before the failure stay on disk.
        """
        log.info(f"Loading mods from [dim]{escape(str(self.config.manifest_path))}[/dim]..")
        items = load_manifest(self.config.manifest_path)
        self.stats.items_total = len(items)
        log.info(f"Found {len(items)} mods")

        try:
            for item in items:
                await self.process_item(item)
        finally:
            await self.close()

        log.info("[bold green]All mods checked out. Bye![/bold green]")
        return self.stats

    async def process_item(self, item: WorkshopItem) -> ItemAction:
        """Brings a single item into the mods folder."""
        paths = self.paths_for(item)
        plan = self.plan(paths)
        label = escape(str(item))

        if self.config.dry_run:
            self._describe_plan(label, paths, plan)
            return plan.action

        if plan.remove_destination:
            log.info(f"Removing {escape(str(paths.destination_path))} from mods folder (clean)")
            remove_dir(paths.destination_path)
            self.stats.dirs_removed += 1

        if plan.action is ItemAction.SKIP:
            log.info(f"[yellow]○ Mod {label} already exists. Skipping...[/yellow]")
            self.stats.items_skipped_exists += 1
            return plan.action

        if plan.remove_staging:
            log.info(f"Removing {escape(str(paths.staging_path))} from steam folder (clean)")
            remove_dir(paths.staging_path)
            self.stats.dirs_removed += 1

        if plan.action is ItemAction.COPY_STAGED:
            log.info(f"Mod {label} already downloaded. Moving...")
            self._place(paths)
            self.stats.items_copied_from_staging += 1
            return plan.action

        log.info(f"[cyan]Downloading {label}...[/cyan]")
        protocol = await self._ensure_protocol()
        sent_before = protocol.requests_sent
        failed_before = protocol.requests_failed
        try:
            await download_item(protocol, item, self.config.max_attempts)
        finally:
            self.stats.download_attempts += protocol.requests_sent - sent_before
            self.stats.download_failures += protocol.requests_failed - failed_before

        await wait_for_directory(
            paths.staging_path,
            attempts=self.config.poll_attempts,
            step=self.config.poll_step_seconds,
            strict=self.config.strict_staging,
        )
        log.info(f"[green]✓ Downloaded {label}[/green]")
        self._place(paths)
        self.stats.items_downloaded += 1
        return plan.action

    async def close(self) -> None:
        """Shuts down the SteamCMD session if one was started."""
        session, self._session = self._session, None
        self._protocol = None
        if session is not None:
            await session.close()

    async def _ensure_protocol(self) -> WorkshopProtocol:
        """Starts SteamCMD and logs in the first time a download is needed."""
        if self._protocol is not None:
            return self._protocol

        log.info("Spawning SteamCMD...")
        self._session = self._session_factory()
        await self._session.open()
        await login(
            self._session,
            timeout=self.config.login_timeout,
            max_lines=self.config.max_protocol_lines,
        )
        self._protocol = WorkshopProtocol(
            self._session,
            app_id=self.config.app_id,
            timeout=self.config.download_timeout,
            max_lines=self.config.max_protocol_lines,
        )
        return self._protocol

    def _place(self, paths: ItemPaths) -> None:
        create_dir(paths.destination_path)
        copy_contents(paths.staging_path, paths.destination_path)

    def _describe_plan(self, label: str, paths: ItemPaths, plan: ItemPlan) -> None:
        prefix = "  [cyan]→ (Dry Run)[/]"
        if plan.remove_destination:
            log.info(f"{prefix} Would remove {escape(str(paths.destination_path))}")
        if plan.remove_staging:
            log.info(f"{prefix} Would remove {escape(str(paths.staging_path))}")

        if plan.action is ItemAction.SKIP:
            log.info(f"{prefix} Would skip {label} (already exists)")
            self.stats.items_skipped_exists += 1
        elif plan.action is ItemAction.COPY_STAGED:
            log.info(f"{prefix} Would copy {label} from {escape(str(paths.staging_path))}")
            self.stats.items_copied_from_staging += 1
        else:
            log.info(f"{prefix} Would download {label}")
            self.stats.items_downloaded += 1
