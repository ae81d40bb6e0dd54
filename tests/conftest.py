"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable
from pathlib import Path

import pytest

from rimsync.client.protocol import LOGIN_SUCCESS_MARKER
from rimsync.exceptions import ProtocolTimeoutError
from rimsync.models.config import SyncConfig


class FakeSession:
    """
    Stands in for SteamCmdSession.

    Every command sent is recorded in `sent`; `script(command)` returns the
    lines "printed" in reply. Once the replies run out, `read_line` reports
    end of stream, or waits out the timeout when `hang` is set.
    """

    def __init__(
        self,
        script: Callable[[str], list[str]] | None = None,
        hang: bool = False,
    ):
        self.script = script or (lambda command: [])
        self.hang = hang
        self.sent: list[str] = []
        self.opened = False
        self.closed = False
        self.returncode: int | None = None
        self._pending: deque[str] = deque()

    @property
    def download_commands(self) -> list[str]:
        return [c for c in self.sent if c.startswith("workshop_download_item")]

    def feed(self, *lines: str) -> None:
        self._pending.extend(lines)

    async def open(self) -> None:
        self.opened = True

    async def send_line(self, text: str) -> None:
        self.sent.append(text)
        self._pending.extend(self.script(text))

    async def read_line(self, timeout: float | None = None) -> str | None:
        if self._pending:
            return self._pending.popleft()
        if self.hang:
            if not timeout:
                await asyncio.Event().wait()
            await asyncio.sleep(timeout)
            raise ProtocolTimeoutError(f"no output for {timeout}s")
        self.returncode = 0
        return None

    async def close(self) -> None:
        self.closed = True


def steamcmd_script(
    outcomes: dict[int, list[str]] | None = None,
    staging_root: Path | None = None,
) -> Callable[[str], list[str]]:
    """
    Builds a reply script imitating SteamCMD.

    `outcomes` maps an item id to the verdicts of its successive download
    requests ("success" or "fail"); unlisted ids succeed. On success the
    item's folder is created under `staging_root`, like SteamCMD does.
    """
    outcomes = {k: list(v) for k, v in (outcomes or {}).items()}

    def script(command: str) -> list[str]:
        if command == "login anonymous":
            return [
                "Redirecting stderr to 'logs/stderr.txt'",
                "Logging in user 'anonymous' to Steam Public...OK",
                LOGIN_SUCCESS_MARKER,
            ]

        parts = command.split()
        if parts[0] != "workshop_download_item":
            return []

        item_id = int(parts[2])
        planned = outcomes.get(item_id)
        verdict = planned.pop(0) if planned else "success"
        if verdict == "fail":
            return [
                f"Downloading item {item_id} ...",
                f"ERROR! Download item {item_id} failed (Failure).",
            ]

        target = f"/staging/{item_id}"
        if staging_root is not None:
            folder = staging_root / str(item_id)
            (folder / "About").mkdir(parents=True, exist_ok=True)
            (folder / "About" / "About.xml").write_text(f"<id>{item_id}</id>")
            target = str(folder)
        return [
            f"Downloading item {item_id} ...",
            f'Success. Downloaded item {item_id} to "{target}" (1024 bytes)',
        ]

    return script


@pytest.fixture()
def mods_dir(tmp_path: Path) -> Path:
    path = tmp_path / "Mods"
    path.mkdir()
    return path


@pytest.fixture()
def steam_dir(tmp_path: Path) -> Path:
    path = tmp_path / "workshop" / "content" / "294100"
    path.mkdir(parents=True)
    return path


@pytest.fixture()
def write_manifest(mods_dir: Path):
    def _write(*lines: str, name: str = "mods.txt") -> Path:
        path = mods_dir / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def make_config(mods_dir: Path, steam_dir: Path):
    def _make(**overrides) -> SyncConfig:
        settings = {
            "mods_dir": mods_dir,
            "steam_dir": steam_dir,
            "poll_step_seconds": 0,
            "login_timeout": 5,
            "download_timeout": 5,
        }
        settings.update(overrides)
        return SyncConfig(**settings)

    return _make


def populate(folder: Path, filename: str = "About.xml", content: str = "x") -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    (folder / filename).write_text(content)
    return folder
