"""
The text protocol spoken with SteamCMD: the anonymous login handshake and the
per-item workshop download exchange.

SteamCMD has no structured responses, so both exchanges work by scanning its
output for known log lines.
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import aclosing
from enum import Enum

from rich.markup import escape

from rimsync.exceptions import (
    ChannelReadError,
    DownloadFailedError,
    LoginFailedError,
    ProtocolTimeoutError,
    SessionError,
)
from rimsync.models.config import RIMWORLD_APP_ID
from rimsync.models.item import WorkshopItem
from rimsync.utils.retry import retry

from .session import SteamCmdSession

log = logging.getLogger(__name__)

LOGIN_COMMAND = "login anonymous"
LOGIN_SUCCESS_MARKER = "Waiting for user info...OK"
DOWNLOAD_COMMAND = "workshop_download_item {app_id} {item_id}"
SUCCESS_PREFIX = "Success. Downloaded item {item_id} to"
FAILURE_PREFIX = "ERROR! Download item {item_id} failed"

SEPARATOR = "-----------------------------"


class DownloadState(Enum):
    """States of a single download request."""

    IDLE = "idle"
    REQUESTED = "requested"  # Command sent, waiting for a verdict line
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class DownloadOutcome(Enum):
    """The verdict SteamCMD gave for one download request."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


def match_line(line: str, item_id: int) -> DownloadOutcome | None:
    """
    Classifies one line of SteamCMD output for the item being downloaded.

    Returns:
        The outcome the line announces, or None if the line says nothing
        about this item.
    """
    if line.startswith(SUCCESS_PREFIX.format(item_id=item_id)):
        return DownloadOutcome.SUCCEEDED
    if line.startswith(FAILURE_PREFIX.format(item_id=item_id)):
        return DownloadOutcome.FAILED
    return None


async def _read_lines(
    session: SteamCmdSession,
    timeout: float,
    max_lines: int,
    waiting_for: str,
) -> AsyncIterator[str]:
    """
    Yields SteamCMD output lines until the stream ends.

    The whole exchange is bounded: it raises ProtocolTimeoutError once
    `timeout` seconds have passed or `max_lines` lines were read without the
    caller stopping. Zero disables either bound.
    """
    deadline = time.monotonic() + timeout if timeout else None
    lines_read = 0

    while True:
        remaining = None
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ProtocolTimeoutError(
                    f"Timed out after {timeout:g}s waiting for {waiting_for}."
                )

        try:
            line = await session.read_line(timeout=remaining)
        except ProtocolTimeoutError as e:
            raise ProtocolTimeoutError(
                f"Timed out after {timeout:g}s waiting for {waiting_for}."
            ) from e

        if line is None:
            return

        log.debug(f"Steam -> {escape(line)}")
        yield line

        lines_read += 1
        if max_lines and lines_read >= max_lines:
            raise ProtocolTimeoutError(
                f"SteamCMD printed {lines_read} lines without {waiting_for}."
            )


async def login(
    session: SteamCmdSession, timeout: float = 120.0, max_lines: int = 0
) -> None:
    """
    Logs SteamCMD into Steam anonymously and waits for it to confirm.

    Raises:
        LoginFailedError: If SteamCMD closes its output before confirming.
        ProtocolTimeoutError: If the confirmation does not arrive in time.
    """
    log.info("Waiting for SteamCMD login...")
    log.debug(SEPARATOR)
    await session.send_line(LOGIN_COMMAND)

    lines = _read_lines(session, timeout, max_lines, "the login to finish")
    async with aclosing(lines):
        async for line in lines:
            if line == LOGIN_SUCCESS_MARKER:
                log.debug(SEPARATOR)
                log.info("[green]✓ Logged into SteamCMD correctly[/green]")
                return

    raise LoginFailedError(
        "SteamCMD exited before confirming the anonymous login "
        f"(exit code {session.returncode})."
    )


class WorkshopProtocol:
    """
    Drives one workshop download request at a time over a logged-in session.

    Each call to `request` walks IDLE -> REQUESTED -> SUCCEEDED | FAILED and
    issues no further commands once a verdict for the item is seen.

    SteamCMD works through its commands in order and cannot abandon one, so a
    request that timed out is still owed a verdict. The next call settles that
    debt before anything else: for the same item it simply keeps waiting, for
    another item it reads the late verdict and discards it.
    """

    def __init__(
        self,
        session: SteamCmdSession,
        app_id: int = RIMWORLD_APP_ID,
        timeout: float = 600.0,
        max_lines: int = 0,
    ):
        self.session = session
        self.app_id = app_id
        self.timeout = timeout
        self.max_lines = max_lines
        self.state = DownloadState.IDLE
        self.requests_sent = 0
        self.requests_failed = 0
        # Item whose verdict SteamCMD has not printed yet
        self.pending_item_id: int | None = None

    async def request(self, item: WorkshopItem) -> DownloadOutcome:
        """
        Asks SteamCMD to download one item and waits for its verdict.

        Raises:
            ChannelReadError: If SteamCMD's output ends before a verdict.
            ChannelWriteError: If the command cannot be sent.
            ProtocolTimeoutError: If no verdict arrives in time.
        """
        self.state = DownloadState.IDLE
        log.debug(SEPARATOR)
        try:
            stale_id = self.pending_item_id
            if stale_id is not None and stale_id != item.item_id:
                late = await self._read_verdict(stale_id)
                log.debug(f"Discarded late verdict for item {stale_id}: {late.value}")

            if self.pending_item_id == item.item_id:
                log.debug(f"Item {item.item_id} is still downloading, waiting on")
            else:
                await self.session.send_line(
                    DOWNLOAD_COMMAND.format(app_id=self.app_id, item_id=item.item_id)
                )
                self.requests_sent += 1
                self.pending_item_id = item.item_id
            self.state = DownloadState.REQUESTED

            outcome = await self._read_verdict(item.item_id)
        except SessionError:
            self.state = DownloadState.FAILED
            self.requests_failed += 1
            raise

        log.debug(SEPARATOR)
        if outcome is DownloadOutcome.SUCCEEDED:
            self.state = DownloadState.SUCCEEDED
        else:
            self.state = DownloadState.FAILED
            self.requests_failed += 1
        return outcome

    async def _read_verdict(self, item_id: int) -> DownloadOutcome:
        """Reads output until SteamCMD reports on `item_id`."""
        lines = _read_lines(
            self.session,
            self.timeout,
            self.max_lines,
            f"the download of item {item_id}",
        )
        async with aclosing(lines):
            async for line in lines:
                outcome = match_line(line, item_id)
                if outcome is not None:
                    self.pending_item_id = None
                    return outcome

        self.pending_item_id = None
        raise ChannelReadError(f"SteamCMD exited while downloading item {item_id}.")


async def download_item(
    protocol: WorkshopProtocol, item: WorkshopItem, attempts: int = 3
) -> None:
    """
    Downloads one item, repeating the whole request up to `attempts` times.

    Both a reported failure and a broken conversation with SteamCMD count as
    a failed attempt. After a timeout the next attempt keeps waiting on the
    command already sent instead of queueing a second one.

    Raises:
        DownloadFailedError: Once every attempt has failed.
    """

    async def attempt() -> None:
        if await protocol.request(item) is DownloadOutcome.FAILED:
            raise DownloadFailedError(item.name, item.item_id)

    def on_retry(attempt_number: int, error: BaseException) -> None:
        log.warning(
            f"[yellow]Mod download failed, retrying ({attempt_number}/{attempts - 1})"
            f": {escape(str(error))}[/yellow]"
        )

    try:
        await retry(
            attempts,
            attempt,
            retry_on=(DownloadFailedError, SessionError),
            on_retry=on_retry,
        )
    except (DownloadFailedError, SessionError) as e:
        raise DownloadFailedError(
            item.name,
            item.item_id,
            f"Error downloading mod {item.name} ({item.item_id}) "
            f"after {attempts} attempts: {e}",
        ) from e
