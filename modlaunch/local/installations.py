import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from modlaunch.local import app_globals
from modlaunch.local.launcher.models import Installation

log = logging.getLogger(__name__)


class InstallationStore:
    """
    A small JSON catalog of named game installations.

    The file maps a name to its install path, executable and plugin directory.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path or app_globals.INSTALLATIONS_JSON_PATH)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Dict[str, str]]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            log.error(f"Failed to read installations file '{self.path}': {e}")
            return {}
        if not isinstance(data, dict):
            log.error(f"Installations file '{self.path}' is malformed. Ignoring it.")
            return {}
        return data

    def _write(self, data: Dict[str, Dict[str, str]]) -> None:
        """Atomically replaces the catalog file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(".tmp")
        try:
            with temp_path.open("w") as f:
                json.dump(data, f, indent=4)
            temp_path.replace(self.path)
        finally:
            temp_path.unlink(missing_ok=True)

    @staticmethod
    def _to_installation(name: str, entry: Dict[str, str]) -> Installation:
        return Installation(
            install_path=entry["install_path"],
            executable=entry["executable"],
            name=name,
            mod_directory=entry.get("mod_directory") or app_globals.DEFAULT_MOD_DIRECTORY,
        )

    def add(self, name: str, install_path: str, executable: str,
            mod_directory: Optional[str] = None) -> Installation:
        """
        Adds or replaces an installation.

        :raises ValueError: If the install path is not an existing directory.
        """
        root = Path(install_path).expanduser()
        if not root.is_dir():
            raise ValueError(f"Install path '{install_path}' is not a directory.")

        entry = {
            "install_path": str(root.resolve()),
            "executable": executable,
            "mod_directory": mod_directory or app_globals.DEFAULT_MOD_DIRECTORY,
        }
        with self._lock:
            data = self._read()
            data[name] = entry
            self._write(data)
        log.info(f"Saved installation '{name}' at {entry['install_path']}")
        return self._to_installation(name, entry)

    def remove(self, name: str) -> bool:
        with self._lock:
            data = self._read()
            if name not in data:
                return False
            del data[name]
            self._write(data)
        log.info(f"Removed installation '{name}'")
        return True

    def get(self, name: str) -> Optional[Installation]:
        with self._lock:
            entry = self._read().get(name)
        if entry is None:
            return None
        try:
            return self._to_installation(name, entry)
        except (KeyError, TypeError):
            log.error(f"Installation '{name}' is missing required fields.")
            return None

    def all(self) -> List[Installation]:
        with self._lock:
            data = self._read()
        installations = []
        for name, entry in sorted(data.items()):
            try:
                installations.append(self._to_installation(name, entry))
            except (KeyError, TypeError):
                log.warning(f"Skipping malformed installation entry '{name}'.")
        return installations
