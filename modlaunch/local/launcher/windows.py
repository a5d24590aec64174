"""
Graceful close requests for launched processes.

On Windows the request is a WM_CLOSE posted to the process's visible top-level
windows, the same thing clicking the close button does. Elsewhere there is no
portable window handle, so processes count as windowless and go straight to
the tree kill, unless POSIX_SIGTERM_CLOSE opts into a SIGTERM close request.
"""
import sys
import logging
from typing import List

import psutil

from modlaunch.local import app_globals

log = logging.getLogger(__name__)


class Win32WindowCloser:
    """Closes a process's main windows through the Win32 API (pywin32)."""

    def _find_windows(self, pid: int) -> List[int]:
        import win32gui
        import win32process

        def enum_handler(hwnd, ctx):
            if win32gui.IsWindowVisible(hwnd) and win32gui.GetParent(hwnd) == 0:
                _, window_pid = win32process.GetWindowThreadProcessId(hwnd)
                if window_pid == pid:
                    ctx.append(hwnd)
            return True

        windows: List[int] = []
        win32gui.EnumWindows(enum_handler, windows)
        return windows

    def request_close(self, proc: psutil.Process) -> bool:
        """
        Posts WM_CLOSE to every visible top-level window of the process.

        :return: False if the process owns no such window.
        """
        import pywintypes
        import win32con
        import win32gui

        try:
            windows = self._find_windows(proc.pid)
            for hwnd in windows:
                log.debug(f"Posting WM_CLOSE to HWND={hwnd} (PID {proc.pid})")
                win32gui.PostMessage(hwnd, win32con.WM_CLOSE, 0, 0)
        except pywintypes.error as e:
            log.warning(f"Could not close windows of PID {proc.pid}: {e}")
            return False
        return bool(windows)


class SignalWindowCloser:
    """Uses SIGTERM as the close request; enabled by POSIX_SIGTERM_CLOSE."""

    def request_close(self, proc: psutil.Process) -> bool:
        try:
            log.debug(f"Sending SIGTERM to {proc.name()} (PID {proc.pid})")
            proc.terminate()
            return True
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied:
            log.warning(f"Access denied sending SIGTERM to PID {proc.pid}.")
            return False


class NoWindowCloser:
    """Reports every process as windowless."""

    def request_close(self, proc: psutil.Process) -> bool:
        return False


def default_closer():
    """Returns the close strategy for the current platform and settings."""
    if sys.platform == "win32":
        return Win32WindowCloser()
    if app_globals.POSIX_SIGTERM_CLOSE:
        return SignalWindowCloser()
    return NoWindowCloser()
