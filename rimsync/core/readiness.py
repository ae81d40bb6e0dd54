"""
Waits for SteamCMD's output directory to show up after a reported download.
"""

import asyncio
import logging
from pathlib import Path

from rimsync.exceptions import StagingNotReadyError

log = logging.getLogger(__name__)


async def wait_for_directory(
    path: Path, attempts: int = 10, step: float = 0.25, strict: bool = False
) -> bool:
    """
    Polls until `path` is an existing directory.

    Before check number i (counting from 0) it sleeps i * step seconds, so
    the defaults wait at most 0 + 0.25 + ... + 2.25 = 11.25 seconds.

    Returns:
        True as soon as the directory exists, False if it never appeared and
        `strict` is off.

    Raises:
        StagingNotReadyError: If the directory never appeared and `strict`
        is on.
    """
    for i in range(attempts):
        await asyncio.sleep(i * step)
        if path.is_dir():
            return True

    if strict:
        raise StagingNotReadyError(
            f"{path} did not appear after {attempts} checks."
        )
    log.warning(
        f"[yellow]{path} did not appear after {attempts} checks, "
        "continuing anyway.[/yellow]"
    )
    return False
