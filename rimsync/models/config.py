"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Steam application id of RimWorld; its workshop hosts the mods.
RIMWORLD_APP_ID = 294100
DEFAULT_MANIFEST_NAME = "mods.txt"


class SyncConfig(BaseModel):
    """A validated configuration model for a sync run."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Directories
    mods_dir: Path
    steam_dir: Path
    manifest_name: str = DEFAULT_MANIFEST_NAME

    # Run behaviour
    clean: bool = False
    dry_run: bool = False

    # SteamCMD client
    steamcmd_path: str = "steamcmd"
    app_id: int = RIMWORLD_APP_ID
    max_attempts: int = 3
    # Seconds; 0 waits forever
    login_timeout: float = 120.0
    download_timeout: float = 600.0
    # 0 means no cap on the number of output lines per exchange
    max_protocol_lines: int = 0

    # Readiness polling of the staging directory
    poll_attempts: int = 10
    poll_step_seconds: float = 0.25
    strict_staging: bool = False

    # Internal fields not loaded from INI file
    config_path: str | None = Field(default=None, repr=False)

    @field_validator("mods_dir")
    @classmethod
    def validate_mods_dir(cls, v: Path) -> Path:
        if not v.is_dir():
            raise ValueError("mods_dir expected to be a directory and exist!")
        return v

    @field_validator("steam_dir")
    @classmethod
    def validate_steam_dir(cls, v: Path) -> Path:
        if not v.is_dir():
            raise ValueError("steam_dir expected to be a directory and exist!")
        return v

    @field_validator("steamcmd_path", "manifest_name")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Value cannot be empty.")
        return v

    @field_validator("app_id")
    @classmethod
    def validate_app_id(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"App ID must be a positive integer, but got: {v}")
        return v

    @field_validator("max_attempts", "poll_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        """Ensures a reasonable number of attempts."""
        if v < 1 or v > 20:
            raise ValueError("Attempt counts must be between 1 and 20.")
        return v

    @field_validator(
        "login_timeout", "download_timeout", "poll_step_seconds", "max_protocol_lines"
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Timeouts, limits and delays cannot be negative.")
        return v

    @model_validator(mode="after")
    def validate_manifest_present(self) -> "SyncConfig":
        """The manifest must live inside the mods directory."""
        if not self.manifest_path.is_file():
            raise ValueError(
                f"Error! {self.manifest_name} file not found in {self.mods_dir}"
            )
        return self

    @property
    def manifest_path(self) -> Path:
        return self.mods_dir / self.manifest_name

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that may appear in the INI file."""
        cli_only_fields = {"mods_dir", "steam_dir", "clean", "dry_run", "config_path"}
        return {key for key in cls.model_fields if key not in cli_only_fields}
