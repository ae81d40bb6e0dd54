"""
Owns the long-lived SteamCMD process and its line-oriented stdin/stdout channels.
"""

import asyncio
import logging
from collections.abc import Sequence

from rich.markup import escape

from rimsync.exceptions import (
    ChannelReadError,
    ChannelWriteError,
    ProcessLaunchError,
    ProtocolTimeoutError,
)

log = logging.getLogger(__name__)

# SteamCMD can print very long lines while it updates itself
STREAM_LIMIT = 1024 * 1024


class SteamCmdSession:
    """
    A single conversation with a SteamCMD process.

    Commands are written one per line to the process's stdin and its stdout is
    read back line by line. Callers must strictly alternate between sending a
    request and reading its response; the session is never shared between
    concurrent operations.
    """

    def __init__(
        self,
        executable: str = "steamcmd",
        args: Sequence[str] = (),
        encoding: str = "utf-8",
    ):
        self.executable = executable
        self.args = tuple(args)
        self.encoding = encoding
        self._process: asyncio.subprocess.Process | None = None

    @property
    def is_open(self) -> bool:
        return self._process is not None

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process else None

    async def open(self) -> None:
        """
        Launches the SteamCMD executable with piped stdin and stdout.

        Raises:
            ProcessLaunchError: If the executable cannot be started.
        """
        if self._process is not None:
            return

        log.debug(escape(f"Launching {self.executable} {' '.join(self.args)}".rstrip()))
        try:
            self._process = await asyncio.create_subprocess_exec(
                self.executable,
                *self.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise ProcessLaunchError(
                f"Could not start '{self.executable}': {e}"
            ) from e

    async def send_line(self, text: str) -> None:
        """
        Writes one command followed by a newline and flushes it.

        Raises:
            ChannelWriteError: If the session is closed or the pipe is broken.
        """
        if self._process is None or self._process.stdin is None:
            raise ChannelWriteError("SteamCMD session is not open.")

        log.debug(f"Steam <- {escape(text)}")
        try:
            self._process.stdin.write(f"{text}\n".encode(self.encoding))
            await self._process.stdin.drain()
        except OSError as e:
            raise ChannelWriteError(
                f"Could not send '{text}' to SteamCMD: {e}"
            ) from e

    async def read_line(self, timeout: float | None = None) -> str | None:
        """
        Waits for the next full line of SteamCMD output.

        Args:
            timeout: Seconds to wait for the line; None or 0 waits forever.

        Returns:
            The line without its line ending, or None once the process has
            closed its output.

        Raises:
            ChannelReadError: On I/O failure or if the session is not open.
            ProtocolTimeoutError: If no full line arrives within `timeout`.
        """
        if self._process is None or self._process.stdout is None:
            raise ChannelReadError("SteamCMD session is not open.")

        stdout = self._process.stdout
        try:
            if timeout:
                raw = await asyncio.wait_for(stdout.readline(), timeout)
            else:
                raw = await stdout.readline()
        except asyncio.TimeoutError as e:
            raise ProtocolTimeoutError(
                f"SteamCMD produced no output for {timeout:g}s."
            ) from e
        except (OSError, ValueError) as e:
            raise ChannelReadError(f"Could not read SteamCMD output: {e}") from e

        if not raw:
            return None
        return raw.decode(self.encoding, errors="replace").rstrip("\r\n")

    async def close(self, grace: float = 5.0) -> None:
        """
        Asks SteamCMD to quit, terminating it if it does not exit within `grace`
        seconds. Safe to call more than once.
        """
        process, self._process = self._process, None
        if process is None:
            return

        if process.returncode is None and process.stdin is not None:
            try:
                process.stdin.write(b"quit\n")
                await process.stdin.drain()
                process.stdin.close()
            except OSError as e:
                log.debug(f"Could not send quit to SteamCMD: {escape(str(e))}")

        try:
            await asyncio.wait_for(process.wait(), grace)
        except asyncio.TimeoutError:
            log.debug("SteamCMD did not quit in time, terminating it.")
            await _terminate_process(process)

        log.debug(f"SteamCMD exited with code {process.returncode}")

    async def __aenter__(self) -> "SteamCmdSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


async def _terminate_process(process: asyncio.subprocess.Process) -> None:
    try:
        process.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(process.wait(), 2)
    except asyncio.TimeoutError:
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()
