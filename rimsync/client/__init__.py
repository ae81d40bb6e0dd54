"""
SteamCMD Client Layer.

This package owns the SteamCMD subprocess and the text protocol used to log in
and download workshop items through it.
"""

from .protocol import DownloadOutcome, WorkshopProtocol, download_item, login
from .session import SteamCmdSession

__all__ = [
    "DownloadOutcome",
    "SteamCmdSession",
    "WorkshopProtocol",
    "download_item",
    "login",
]
