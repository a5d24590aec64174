import logging
import threading
from typing import Dict, List, Optional

import psutil

log = logging.getLogger(__name__)

ProcessGroup = List[psutil.Process]


class ProcessRegistry:
    """
    In-memory map from an installation key to the process group launched for it.

    All methods are safe to call from several threads at once; callers never
    need their own lock. Nothing here survives a restart of the launcher.
    """

    def __init__(self) -> None:
        self._groups: Dict[str, ProcessGroup] = {}
        self._launch_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def put(self, key: str, group: ProcessGroup) -> Optional[ProcessGroup]:
        """
        Stores a group, replacing any existing one for the key without checking it.

        :return: The replaced group, if there was one. Its processes are no longer
                 tracked and keep running.
        """
        with self._lock:
            previous = self._groups.get(key)
            self._groups[key] = list(group)
        if previous is not None:
            log.warning(
                f"Replaced tracked processes for '{key}' "
                f"(PIDs {[p.pid for p in previous]}); they are no longer supervised."
            )
        return previous

    def take(self, key: str) -> Optional[ProcessGroup]:
        """Removes and returns the group for the key, or None if nothing is tracked."""
        with self._lock:
            return self._groups.pop(key, None)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._groups

    def get(self, key: str) -> Optional[ProcessGroup]:
        """Returns a copy of the group for the key without removing it."""
        with self._lock:
            group = self._groups.get(key)
            return list(group) if group is not None else None

    def discard_if(self, key: str, group: ProcessGroup) -> bool:
        """Removes the entry only if it is still the given group."""
        with self._lock:
            current = self._groups.get(key)
            if current is not None and [p.pid for p in current] == [p.pid for p in group]:
                del self._groups[key]
                return True
            return False

    def snapshot(self) -> Dict[str, ProcessGroup]:
        """Returns a point-in-time copy of every tracked group."""
        with self._lock:
            return {key: list(group) for key, group in self._groups.items()}

    def lock_for(self, key: str) -> threading.Lock:
        """Returns the lock that serializes launches of one installation."""
        with self._lock:
            return self._launch_locks.setdefault(key, threading.Lock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._groups)
