from pathlib import Path

import pytest

from modlaunch.local.launcher import plugin_toggle
from tests.conftest import PLUGIN_FILES, plugin_tree


def test_hide_is_noop_without_plugin_directory(tmp_path):
    assert plugin_toggle.hide(tmp_path / "BepInEx" / "plugins") is None
    assert list(tmp_path.iterdir()) == []


def test_hide_renames_directory_with_contents(plugins):
    hidden = plugin_toggle.hide(plugins)

    assert hidden == plugins.with_name("plugins_disabled")
    assert not plugins.exists()
    assert plugin_tree(hidden) == PLUGIN_FILES


def test_hide_replaces_stale_hidden_directory(plugins):
    stale = plugins.with_name("plugins_disabled")
    stale.mkdir()
    (stale / "Leftover.dll").write_bytes(b"old")

    hidden = plugin_toggle.hide(plugins)

    assert hidden == stale
    assert plugin_tree(hidden) == PLUGIN_FILES


def test_hide_replaces_stale_hidden_file(plugins):
    stale = plugins.with_name("plugins_disabled")
    stale.write_text("not a directory")

    hidden = plugin_toggle.hide(plugins)

    assert hidden.is_dir()
    assert plugin_tree(hidden) == PLUGIN_FILES


def test_restore_moves_directory_back(plugins):
    hidden = plugin_toggle.hide(plugins)
    plugin_toggle.restore(plugins, hidden)

    assert not hidden.exists()
    assert plugin_tree(plugins) == PLUGIN_FILES


def test_restore_never_overwrites_reappeared_directory(plugins):
    hidden = plugin_toggle.hide(plugins)
    plugins.mkdir()
    (plugins / "New.dll").write_bytes(b"new")

    plugin_toggle.restore(plugins, hidden)

    assert plugin_tree(plugins) == {"New.dll": b"new"}
    assert plugin_tree(hidden) == PLUGIN_FILES


def test_restore_tolerates_missing_hidden_directory(tmp_path):
    plugin_toggle.restore(tmp_path / "plugins", tmp_path / "plugins_disabled")
    assert not (tmp_path / "plugins").exists()


def test_restore_of_noop_hide_does_nothing(tmp_path):
    plugin_toggle.restore(tmp_path / "plugins", None)
    assert list(tmp_path.iterdir()) == []


def test_restore_swallows_rename_errors(plugins, monkeypatch):
    hidden = plugin_toggle.hide(plugins)

    def refuse(self, target):
        raise PermissionError("directory in use")

    monkeypatch.setattr(Path, "rename", refuse)
    plugin_toggle.restore(plugins, hidden)

    assert hidden.exists()
    assert not plugins.exists()


def test_hidden_context_restores_after_error(plugins):
    with pytest.raises(RuntimeError):
        with plugin_toggle.hidden(plugins) as hidden:
            assert hidden is not None and not plugins.exists()
            raise RuntimeError("spawn blew up")

    assert plugin_tree(plugins) == PLUGIN_FILES
