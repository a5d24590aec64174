import sys
import logging
import threading
import subprocess
from pathlib import Path
from typing import Any, Dict, List

import psutil

from modlaunch.local import app_globals
from modlaunch.local.launcher.models import Installation

log = logging.getLogger(__name__)


#* --- Path Resolution ---
def installation_key(installation: Installation) -> str:
    """Returns the registry key for an installation: its normalized root path."""
    return str(Path(installation.install_path).expanduser().resolve())

def resolve_executable(installation: Installation) -> Path:
    """Returns the absolute path of the installation's primary executable."""
    return Path(installation.install_path) / installation.executable

def launch_script_path(installation: Installation) -> Path:
    """Returns where the BepInEx installer puts its Unix launch script."""
    return Path(installation.install_path) / app_globals.LAUNCH_SCRIPT_NAME

def script_command(script: Path) -> List[str]:
    """Returns the command line that runs a launch script through the configured shell."""
    return [app_globals.LAUNCH_SCRIPT_SHELL, str(script)]

#* --- Process Creation ---
def _get_popen_creation_flags() -> Dict[str, Any]:
    """Returns platform-specific keyword arguments for subprocess.Popen."""
    if sys.platform == "win32":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    # Own session so a Ctrl+C in the console does not reach the game.
    return {"start_new_session": True}

def _game_output_reader(pipe, game_name: str, level: int):
    """Forwards each non-blank line of a game's output stream to `proc.<game_name>`."""
    game_logger = logging.getLogger(f"proc.{game_name}")
    try:
        for raw in iter(pipe.readline, b""):
            text = raw.decode("utf-8", errors="replace").rstrip()
            if text:
                game_logger.log(level, text)
    except (OSError, ValueError) as e:
        game_logger.debug(f"Output stream of {game_name} closed: {e}")
    finally:
        pipe.close()

def capture_game_output(process: subprocess.Popen, game_name: str):
    """Logs a spawned game's stdout at INFO and stderr at ERROR on daemon threads."""
    for stream, level in ((process.stdout, logging.INFO), (process.stderr, logging.ERROR)):
        if stream is not None:
            threading.Thread(
                target=_game_output_reader, args=(stream, game_name, level),
                name=f"output-{game_name}", daemon=True,
            ).start()

def spawn_process(args: List[str], cwd: Path, name: str) -> psutil.Popen:
    """
    Starts a process and returns its `psutil.Popen` handle as soon as the OS has created it.

    The handle owns the child, so the shutdown path reaps it and no Popen is left
    behind unwaited.

    :param args: The command line.
    :param cwd: The working directory for the new process.
    :param name: Label used for the `proc.<name>` output logger.
    :raises OSError: If the OS refuses to create the process.
    """
    log.info(f"Starting process for {name}: {' '.join(args)}")
    popen_kwargs = _get_popen_creation_flags()
    if app_globals.CAPTURE_PROCESS_OUTPUT:
        popen_kwargs.update(stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    else:
        popen_kwargs.update(stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)

    p = psutil.Popen(args, stdin=subprocess.DEVNULL, cwd=str(Path(cwd).resolve()), **popen_kwargs)
    capture_game_output(p, name)
    log.info(f"{name} started with PID: {p.pid}")
    return p

#* --- Process Status ---
def is_alive(proc: psutil.Process) -> bool:
    """True if the process is running and not a zombie."""
    try:
        return proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied:
        return proc.is_running()

def get_proc_status_string(proc: psutil.Process) -> str:
    """Gets a string representation of a process status."""
    try:
        if proc.status() == psutil.STATUS_ZOMBIE:
            return "zombie"
        return "running" if proc.is_running() else "stopped"
    except psutil.NoSuchProcess:
        return "stopped"
    except psutil.Error:
        return "unknown"

def describe(proc: psutil.Process) -> str:
    """Returns 'name (PID n)' for logs and error messages, tolerating dead processes."""
    try:
        return f"{proc.name()} (PID {proc.pid})"
    except psutil.Error:
        return f"PID {proc.pid}"
