"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class RimsyncError(Exception):
    """Base exception for all application-specific errors."""


class ConfigError(RimsyncError):
    """Raised for bad directories, a missing manifest or invalid settings."""


class ManifestFormatError(RimsyncError):
    """Raised when a manifest line cannot be parsed into a workshop item."""


class PlacementError(RimsyncError):
    """Raised when creating, removing or copying a mod directory fails."""


class StagingNotReadyError(RimsyncError):
    """
    Raised in strict mode when the SteamCMD output directory never appears
    after a reported successful download.
    """


class SessionError(RimsyncError):
    """Base class for failures talking to the SteamCMD process."""


class ProcessLaunchError(SessionError):
    """Raised when the SteamCMD executable cannot be started."""


class ChannelWriteError(SessionError):
    """Raised when a command cannot be written to SteamCMD's stdin."""


class ChannelReadError(SessionError):
    """Raised when SteamCMD's output cannot be read or ends unexpectedly."""


class ProtocolTimeoutError(SessionError):
    """Raised when SteamCMD does not produce an expected marker in time."""


class LoginFailedError(RimsyncError):
    """Raised when SteamCMD exits before confirming the anonymous login."""


class DownloadFailedError(RimsyncError):
    """Raised when SteamCMD reports that a workshop item download failed."""

    def __init__(self, item_name: str, item_id: int, message: str | None = None):
        self.item_name = item_name
        self.item_id = item_id
        super().__init__(message or f"Error downloading mod {item_name} ({item_id})")
