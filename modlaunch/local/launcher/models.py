from enum import Enum
from pathlib import Path
from collections import namedtuple

from modlaunch.settings import DEFAULT_MOD_DIRECTORY

# An installation as supplied by the caller. `install_path` is the game root and
# `executable` is relative to it.
Installation = namedtuple(
    'Installation',
    ['install_path', 'executable', 'name', 'mod_directory'],
    defaults=("", DEFAULT_MOD_DIRECTORY),
)

LaunchOutcome = namedtuple('LaunchOutcome', ['success', 'message', 'error', 'category'])


class LaunchMode(Enum):
    VANILLA = "vanilla"
    MODDED = "modded"


class ErrorCategory(Enum):
    """Machine-checkable reasons a launch or stop request failed."""
    PREREQUISITE_MISSING = "prerequisite_missing"
    EXECUTABLE_NOT_FOUND = "executable_not_found"
    SPAWN_FAILED = "spawn_failed"
    NOT_RUNNING = "not_running"
    TERMINATION_FAILED = "termination_failed"


def success_result(message: str = "Operation completed successfully") -> LaunchOutcome:
    return LaunchOutcome(True, message, None, None)


def error_result(category: ErrorCategory, error: str, message: str = "Operation failed") -> LaunchOutcome:
    return LaunchOutcome(False, message, error, category)


def display_name(installation: Installation) -> str:
    """Returns a short label for logs: the configured name or the root folder name."""
    return installation.name or Path(installation.install_path).name
