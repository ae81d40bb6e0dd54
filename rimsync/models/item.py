"""
Workshop item records parsed from the manifest, and the directories derived from them.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class WorkshopItem:
    """One Steam Workshop package listed in the manifest."""

    item_id: int
    name: str
    url: str

    def __str__(self) -> str:
        return f"{self.name} ({self.item_id})"


@dataclass(frozen=True)
class ItemPaths:
    """Where SteamCMD stages an item and where the mod finally lives."""

    staging_path: Path
    destination_path: Path

    @classmethod
    def for_item(
        cls, item: WorkshopItem, steam_dir: Path, mods_dir: Path
    ) -> "ItemPaths":
        folder = str(item.item_id)
        return cls(staging_path=steam_dir / folder, destination_path=mods_dir / folder)
