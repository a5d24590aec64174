import shutil
import logging
from pathlib import Path
from contextlib import contextmanager
from typing import Generator, Optional
from modlaunch.local import app_globals

log = logging.getLogger(__name__)


def hidden_path_for(plugin_path: Path) -> Path:
    """Returns the sibling path a plugin directory is parked at during a vanilla launch."""
    return plugin_path.with_name(plugin_path.name + app_globals.HIDDEN_DIR_SUFFIX)


def _remove_stale(hidden_path: Path) -> None:
    """Deletes whatever a previous incomplete vanilla launch left at the hidden path."""
    log.warning(f"Removing stale hidden plugin directory '{hidden_path}'.")
    if hidden_path.is_dir() and not hidden_path.is_symlink():
        shutil.rmtree(hidden_path)
    else:
        hidden_path.unlink()


def hide(plugin_path: Path) -> Optional[Path]:
    """
    Moves the plugin directory out of the loader's sight.

    :param plugin_path: The plugin directory the loader scans at startup.
    :return: The hidden path, or None if there was nothing to hide.
    """
    plugin_path = Path(plugin_path)
    if not plugin_path.exists():
        log.debug(f"No plugin directory at '{plugin_path}', nothing to hide.")
        return None

    hidden_path = hidden_path_for(plugin_path)
    if hidden_path.exists() or hidden_path.is_symlink():
        _remove_stale(hidden_path)

    plugin_path.rename(hidden_path)
    log.debug(f"Plugin directory hidden: '{plugin_path}' -> '{hidden_path}'")
    return hidden_path


def restore(original_path: Path, hidden_path: Optional[Path]) -> None:
    """
    Moves a hidden plugin directory back. Never raises.

    Nothing happens when the original path has reappeared in the meantime or
    the hidden path is gone.
    """
    if hidden_path is None:
        return
    original_path, hidden_path = Path(original_path), Path(hidden_path)
    try:
        if original_path.exists():
            log.warning(f"'{original_path}' already exists, leaving '{hidden_path}' in place.")
            return
        if not hidden_path.exists():
            log.warning(f"Hidden plugin directory '{hidden_path}' is missing, nothing to restore.")
            return
        hidden_path.rename(original_path)
        log.debug(f"Plugin directory restored: '{hidden_path}' -> '{original_path}'")
    except OSError as e:
        log.error(f"Failed to restore plugin directory '{original_path}' from '{hidden_path}': {e}")


@contextmanager
def hidden(plugin_path: Path) -> Generator[Optional[Path], None, None]:
    """Hides the plugin directory for the duration of the block, then restores it."""
    plugin_path = Path(plugin_path)
    hidden_path = hide(plugin_path)
    try:
        yield hidden_path
    finally:
        restore(plugin_path, hidden_path)
