"""
Utilities for handling workshop URLs and mod directories.
"""

import logging
import re
import shutil
from pathlib import Path

from rich.markup import escape

from rimsync.exceptions import PlacementError

log = logging.getLogger(__name__)

_ID_MARKER = "?id="
_ID_PATTERN = re.compile(r"^-?\d+$")
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1


def parse_workshop_id(url: str) -> int:
    """
    Extracts the numeric item id from a workshop URL such as
    'https://steamcommunity.com/sharedfiles/filedetails/?id=818773962'.

    Raises:
        ValueError: If the URL has no '?id=' marker or the id is not a
        64-bit integer.
    """
    _, marker, rest = url.partition(_ID_MARKER)
    if not marker:
        raise ValueError(f"URL {url!r} does not contain '{_ID_MARKER}'")

    id_str = re.split(r"[&#]", rest, maxsplit=1)[0]
    if not _ID_PATTERN.match(id_str):
        raise ValueError(f"Mod id {id_str!r} in {url!r} is not an integer")

    item_id = int(id_str)
    if not _INT64_MIN <= item_id <= _INT64_MAX:
        raise ValueError(f"Mod id {id_str!r} in {url!r} is out of range")
    return item_id


def dir_has_entries(directory_path: Path) -> bool:
    """True if the path is a directory containing at least one entry."""
    if not directory_path.is_dir():
        return False
    try:
        return any(directory_path.iterdir())
    except OSError as e:
        raise PlacementError(f"Could not list {directory_path}: {e}") from e


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    try:
        directory_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PlacementError(f"Could not create {directory_path}: {e}") from e


def remove_dir(directory_path: Path) -> None:
    """Recursively deletes a directory."""
    log.debug(f"Removing {escape(str(directory_path))}")
    try:
        shutil.rmtree(directory_path)
    except OSError as e:
        raise PlacementError(f"Could not remove {directory_path}: {e}") from e


def copy_contents(source_dir: Path, destination_dir: Path) -> None:
    """
    Copies every entry of source_dir into destination_dir, preserving structure.

    The destination is created if absent; existing files are overwritten.
    """
    log.debug(f"Copying {escape(str(source_dir))} -> {escape(str(destination_dir))}")
    try:
        shutil.copytree(source_dir, destination_dir, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise PlacementError(
            f"Could not copy {source_dir} to {destination_dir}: {e}"
        ) from e
