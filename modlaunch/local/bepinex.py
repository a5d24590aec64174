"""
Default collaborators for the launcher: detecting the BepInEx mod loader and
preparing its plugin directory. Installing or removing BepInEx itself is not
handled here.
"""
import logging
from pathlib import Path
from modlaunch.local import app_globals
from modlaunch.local.launcher.models import Installation

log = logging.getLogger(__name__)


def mods_directory_path(installation: Installation) -> Path:
    """Returns the absolute plugin directory for an installation."""
    return Path(installation.install_path) / (installation.mod_directory or app_globals.DEFAULT_MOD_DIRECTORY)


def is_bepinex_installed(installation: Installation) -> bool:
    """
    Reports whether BepInEx is present in the installation.

    The loader directory must exist alongside at least one of the entry points
    the installer drops at the game root (the Windows proxy DLL, the doorstop
    config or the Unix launch script).
    """
    try:
        root = Path(installation.install_path)
        if not (root / app_globals.MOD_LOADER_DIR_NAME).is_dir():
            return False
        return any((root / name).is_file() for name in app_globals.MOD_LOADER_PROXY_FILES)
    except OSError as e:
        log.debug(f"Could not inspect '{installation.install_path}' for BepInEx: {e}")
        return False


def ensure_mods_directory(installation: Installation) -> None:
    """Creates the plugin directory if it is missing. Safe to call repeatedly."""
    mods_root = mods_directory_path(installation)
    if not mods_root.is_dir():
        mods_root.mkdir(parents=True, exist_ok=True)
        log.debug(f"Created mods directory at {mods_root}")
