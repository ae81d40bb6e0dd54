from __future__ import annotations

import pytest

from rimsync.exceptions import ConfigError
from rimsync.models.config import RIMWORLD_APP_ID
from rimsync.storage.config_manager import ConfigManager


@pytest.fixture()
def cli_options(mods_dir, steam_dir, write_manifest):
    write_manifest("http://x?id=1 Mod")
    return {"mods_dir": mods_dir, "steam_dir": steam_dir}


def test_defaults_without_config_file(cli_options) -> None:
    config = ConfigManager().load_config(cli_options)

    assert config.app_id == RIMWORLD_APP_ID
    assert config.steamcmd_path == "steamcmd"
    assert config.max_attempts == 3
    assert config.poll_attempts == 10
    assert config.poll_step_seconds == 0.25
    assert not config.clean
    assert not config.strict_staging
    assert config.manifest_path.name == "mods.txt"


def test_missing_mods_dir(tmp_path, steam_dir) -> None:
    with pytest.raises(ConfigError, match="mods_dir expected to be a directory"):
        ConfigManager().load_config({"mods_dir": tmp_path / "nope", "steam_dir": steam_dir})


def test_steam_dir_must_be_a_directory(mods_dir, write_manifest, tmp_path) -> None:
    write_manifest("http://x?id=1 Mod")
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("")

    with pytest.raises(ConfigError, match="steam_dir expected to be a directory"):
        ConfigManager().load_config({"mods_dir": mods_dir, "steam_dir": not_a_dir})


def test_manifest_must_exist_in_mods_dir(mods_dir, steam_dir) -> None:
    with pytest.raises(ConfigError, match="mods.txt file not found"):
        ConfigManager().load_config({"mods_dir": mods_dir, "steam_dir": steam_dir})


def test_ini_values_are_applied_and_cli_wins(cli_options, tmp_path) -> None:
    ini = tmp_path / "rimsync.ini"
    ini.write_text(
        "[DEFAULT]\n"
        "steamcmd_path = /opt/steamcmd/steamcmd.sh\n"
        "app_id = 107410\n"
        "max_attempts = 5\n"
        "download_timeout = 30.5\n"
        "strict_staging = yes\n"
    )

    config = ConfigManager(ini).load_config({**cli_options, "max_attempts": 2, "app_id": None})

    assert config.steamcmd_path == "/opt/steamcmd/steamcmd.sh"
    assert config.app_id == 107410
    assert config.max_attempts == 2
    assert config.download_timeout == 30.5
    assert config.strict_staging is True
    assert config.config_path == str(ini)


def test_unknown_ini_keys_are_ignored(cli_options, tmp_path, caplog) -> None:
    ini = tmp_path / "rimsync.ini"
    ini.write_text("[DEFAULT]\nquality = 6\n")

    ConfigManager(ini).load_config(cli_options)

    assert "Ignoring unknown config key 'quality'" in caplog.text


def test_bad_ini_value(cli_options, tmp_path) -> None:
    ini = tmp_path / "rimsync.ini"
    ini.write_text("[DEFAULT]\nmax_attempts = lots\n")

    with pytest.raises(ConfigError, match="max_attempts"):
        ConfigManager(ini).load_config(cli_options)


def test_missing_ini_file(cli_options, tmp_path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        ConfigManager(tmp_path / "missing.ini").load_config(cli_options)


@pytest.mark.parametrize(
    "override",
    [{"max_attempts": 0}, {"app_id": -1}, {"login_timeout": -5}, {"steamcmd_path": ""}],
)
def test_invalid_values_are_rejected(cli_options, override) -> None:
    with pytest.raises(ConfigError):
        ConfigManager().load_config({**cli_options, **override})
