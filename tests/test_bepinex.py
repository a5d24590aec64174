from pathlib import Path

from modlaunch.local import bepinex
from modlaunch.local.launcher import Installation
from tests.conftest import make_installation


def test_detects_installed_loader(game):
    assert bepinex.is_bepinex_installed(game)


def test_loader_directory_alone_is_not_enough(tmp_path):
    installation = make_installation(tmp_path / "Half", with_loader=False)
    assert not bepinex.is_bepinex_installed(installation)


def test_unix_launch_script_counts_as_entry_point(tmp_path):
    installation = make_installation(tmp_path / "Linux", with_loader=False, with_script=True)
    (Path(installation.install_path) / "BepInEx").mkdir(exist_ok=True)
    assert bepinex.is_bepinex_installed(installation)


def test_missing_install_path_is_not_installed(tmp_path):
    assert not bepinex.is_bepinex_installed(Installation(str(tmp_path / "nowhere"), "game.exe"))


def test_ensure_mods_directory_is_idempotent(tmp_path):
    installation = make_installation(tmp_path / "Fresh", with_plugins=False, with_loader=False)

    bepinex.ensure_mods_directory(installation)
    bepinex.ensure_mods_directory(installation)

    assert (Path(installation.install_path) / "BepInEx" / "plugins").is_dir()


def test_custom_mod_directory(tmp_path):
    installation = Installation(str(tmp_path), "game.exe", "custom", "Mods")
    assert bepinex.mods_directory_path(installation) == tmp_path / "Mods"
