"""
Loads the mod manifest: one "<workshop url> <mod name>" entry per line.
"""

import logging
from pathlib import Path

from rich.markup import escape

from rimsync.exceptions import ConfigError, ManifestFormatError
from rimsync.models.item import WorkshopItem
from rimsync.utils.path import parse_workshop_id

log = logging.getLogger(__name__)


def parse_manifest_line(line: str, line_number: int = 0) -> WorkshopItem:
    """
    Parses a single manifest line into a WorkshopItem.

    The first whitespace-delimited token is the workshop URL; every remaining
    token, rejoined with single spaces, is the display name.

    Raises:
        ManifestFormatError: If the line has no name, or the URL carries no
        parseable `?id=` value.
    """
    parts = line.split()
    where = f"line {line_number}" if line_number else "line"
    if len(parts) < 2:
        raise ManifestFormatError(
            f"Malformed manifest {where}: expected '<url> <name>', got {line!r}"
        )

    url, name = parts[0], " ".join(parts[1:])
    try:
        item_id = parse_workshop_id(url)
    except ValueError as e:
        raise ManifestFormatError(f"Malformed manifest {where}: {e}") from e

    return WorkshopItem(item_id=item_id, name=name, url=url)


def format_manifest_line(item: WorkshopItem) -> str:
    """Renders an item back into its manifest form."""
    return f"{item.url} {item.name}"


def load_manifest(manifest_path: Path) -> list[WorkshopItem]:
    """
    Reads every item from the manifest, in file order.

    Blank lines and lines starting with '#' are ignored. A single malformed
    line aborts the whole load.
    """
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except UnicodeDecodeError as e:
        raise ManifestFormatError(
            f"Manifest '{manifest_path}' is not valid UTF-8: {e}"
        ) from e
    except OSError as e:
        raise ConfigError(f"Could not read manifest '{manifest_path}': {e}") from e

    items: list[WorkshopItem] = []
    seen_ids: set[int] = set()
    for line_number, raw_line in enumerate(lines, 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        try:
            item = parse_manifest_line(line, line_number)
        except ManifestFormatError as e:
            raise ManifestFormatError(f"{manifest_path}: {e}") from e

        if item.item_id in seen_ids:
            log.warning(
                f"[yellow]Mod {item.item_id} is listed more than once "
                f"(line {line_number}).[/yellow]"
            )
        seen_ids.add(item.item_id)

        log.debug(f"Found mod {escape(item.name)} - ({escape(item.url)})")
        items.append(item)

    return items
