from __future__ import annotations

import pytest

from conftest import populate
from rimsync.utils.path import (
    copy_contents,
    create_dir,
    dir_has_entries,
    parse_workshop_id,
    remove_dir,
)


def test_parse_workshop_id_reads_digits_after_marker() -> None:
    assert parse_workshop_id("https://steamcommunity.com/workshop/filedetails/?id=42") == 42


@pytest.mark.parametrize("url", ["http://x/42", "http://x?id=4a2", "http://x?id="])
def test_parse_workshop_id_rejects_bad_urls(url: str) -> None:
    with pytest.raises(ValueError):
        parse_workshop_id(url)


def test_dir_has_entries(tmp_path) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()
    full = populate(tmp_path / "full")

    assert not dir_has_entries(tmp_path / "missing")
    assert not dir_has_entries(empty)
    assert dir_has_entries(full)


def test_copy_contents_preserves_structure_and_creates_destination(tmp_path) -> None:
    source = tmp_path / "123"
    populate(source / "About", "About.xml", "<about/>")
    populate(source / "Assemblies", "Mod.dll", "binary")
    destination = tmp_path / "Mods" / "123"

    copy_contents(source, destination)

    assert (destination / "About" / "About.xml").read_text() == "<about/>"
    assert (destination / "Assemblies" / "Mod.dll").read_text() == "binary"


def test_copy_contents_overwrites_existing_files(tmp_path) -> None:
    source = populate(tmp_path / "src", "a.txt", "new")
    destination = populate(tmp_path / "dst", "a.txt", "old")

    copy_contents(source, destination)

    assert (destination / "a.txt").read_text() == "new"


def test_create_and_remove_dir(tmp_path) -> None:
    target = tmp_path / "a" / "b"

    create_dir(target)
    create_dir(target)
    populate(target)
    remove_dir(target)

    assert not target.exists()
