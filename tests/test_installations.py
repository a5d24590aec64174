import json
from pathlib import Path

import pytest

from modlaunch.local.installations import InstallationStore


@pytest.fixture
def store(tmp_path):
    return InstallationStore(tmp_path / "data" / "installations.json")


def test_add_and_get(store, game):
    added = store.add("hollow", game.install_path, "game.exe")

    fetched = store.get("hollow")
    assert fetched == added
    assert fetched.install_path == str(Path(game.install_path).resolve())
    assert fetched.mod_directory == "BepInEx/plugins"


def test_add_rejects_missing_directory(store, tmp_path):
    with pytest.raises(ValueError):
        store.add("ghost", str(tmp_path / "missing"), "game.exe")
    assert store.all() == []


def test_remove(store, game):
    store.add("hollow", game.install_path, "game.exe")

    assert store.remove("hollow")
    assert not store.remove("hollow")
    assert store.get("hollow") is None


def test_all_is_sorted_and_skips_malformed_entries(store, game):
    store.add("zeta", game.install_path, "game.exe")
    store.add("alpha", game.install_path, "game.exe", "Mods")
    data = json.loads(store.path.read_text())
    data["broken"] = {"executable": "game.exe"}
    store.path.write_text(json.dumps(data))

    names = [i.name for i in store.all()]

    assert names == ["alpha", "zeta"]
    assert store.get("alpha").mod_directory == "Mods"
    assert store.get("broken") is None


def test_corrupt_file_reads_as_empty(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{not json")
    assert store.all() == []
