import sys
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import psutil

from modlaunch.local import bepinex
from modlaunch.local.launcher import plugin_toggle, process_utils
from modlaunch.local.launcher.registry import ProcessGroup, ProcessRegistry
from modlaunch.local.launcher.shutdown import ShutdownOrchestrator
from modlaunch.local.launcher.models import (
    ErrorCategory, Installation, LaunchMode, LaunchOutcome,
    display_name, error_result, success_result,
)

log = logging.getLogger(__name__)


class GameLauncher:
    """
    Launches games in vanilla or modded mode and keeps track of what it started.

    Every public method may be called from several threads at once. Launches of
    the same installation are serialized; different installations never wait
    on each other. Failures come back as LaunchOutcome values, never as
    exceptions.
    """

    def __init__(
        self,
        registry: Optional[ProcessRegistry] = None,
        is_mod_loader_installed: Optional[Callable[[Installation], bool]] = None,
        ensure_mods_directory: Optional[Callable[[Installation], None]] = None,
        orchestrator: Optional[ShutdownOrchestrator] = None,
        spawn: Optional[Callable[[List[str], Path, str], psutil.Process]] = None,
        platform: Optional[str] = None,
    ) -> None:
        self.registry = registry if registry is not None else ProcessRegistry()
        self.is_mod_loader_installed = is_mod_loader_installed or bepinex.is_bepinex_installed
        self.ensure_mods_directory = ensure_mods_directory or bepinex.ensure_mods_directory
        self.orchestrator = orchestrator or ShutdownOrchestrator()
        self.spawn = spawn or process_utils.spawn_process
        self.platform = platform or sys.platform

    def launch_vanilla(self, installation: Installation) -> LaunchOutcome:
        return self.launch(installation, LaunchMode.VANILLA)

    def launch_modded(self, installation: Installation) -> LaunchOutcome:
        return self.launch(installation, LaunchMode.MODDED)

    def launch(self, installation: Installation, mode: LaunchMode) -> LaunchOutcome:
        """
        Starts the game and registers the resulting processes.

        Modded launches require BepInEx. Vanilla launches hide the plugin
        directory while the process is created and put it back as soon as
        the OS has started it, without waiting for the game to exit.
        """
        mode = LaunchMode(mode)
        name = display_name(installation)
        key = process_utils.installation_key(installation)

        if mode is LaunchMode.MODDED and not self.is_mod_loader_installed(installation):
            log.warning(f"Modded launch of {name} refused: BepInEx is not installed.")
            return error_result(ErrorCategory.PREREQUISITE_MISSING, "BepInEx is not installed", "modded launch failed")

        with self.registry.lock_for(key):
            try:
                self.ensure_mods_directory(installation)
            except OSError as e:
                log.warning(f"Could not prepare mods directory for {name}: {e}")

            commands, failure = self._resolve_commands(installation, mode)
            if failure is not None:
                return failure

            if mode is LaunchMode.MODDED:
                return self._spawn_group(key, name, commands, Path(installation.install_path))

            plugin_path = bepinex.mods_directory_path(installation)
            # _spawn_group handles its own OSError, so one reaching here came from the hide.
            try:
                with plugin_toggle.hidden(plugin_path):
                    return self._spawn_group(key, name, commands, Path(installation.install_path))
            except OSError as e:
                log.error(f"Could not hide plugin directory '{plugin_path}': {e}")
                return error_result(ErrorCategory.SPAWN_FAILED, f"could not hide plugins: {e}", "vanilla launch failed")

    def _resolve_commands(self, installation: Installation, mode: LaunchMode) -> Tuple[List[List[str]], Optional[LaunchOutcome]]:
        """Decides what to run: the BepInEx launch script or the game executable."""
        if self.platform != "win32" and mode is LaunchMode.MODDED:
            script = process_utils.launch_script_path(installation)
            if script.is_file():
                log.debug(f"Using launch script {script}")
                return [process_utils.script_command(script)], None

        exe_path = process_utils.resolve_executable(installation)
        if not exe_path.exists():
            log.error(f"Game executable not found at '{exe_path}'.")
            return [], error_result(ErrorCategory.EXECUTABLE_NOT_FOUND, "game executable not found", "launch failed")
        return [[str(exe_path)]], None

    def _spawn_group(self, key: str, name: str, commands: List[List[str]], cwd: Path) -> LaunchOutcome:
        """Starts every command; whatever did start is tracked even if a later one fails."""
        group: ProcessGroup = []
        failure: Optional[Exception] = None
        for args in commands:
            try:
                group.append(self.spawn(args, cwd, name))
            except (OSError, psutil.Error) as e:
                log.error(f"Failed to start '{args[0]}' for {name}: {e}")
                failure = e
                break

        if group:
            self.registry.put(key, group)
        if failure is not None:
            return error_result(ErrorCategory.SPAWN_FAILED, str(failure), "launch failed")
        return success_result("game launched")

    def stop(self, installation: Installation) -> LaunchOutcome:
        """Stops everything launched for the installation."""
        name = display_name(installation)
        group = self.registry.take(process_utils.installation_key(installation))
        if not group:
            log.info(f"Stop requested for {name}, but nothing is running.")
            return error_result(ErrorCategory.NOT_RUNNING, "game is not running", "stop failed")

        log.info(f"Stopping {name} ({len(group)} process(es))...")
        return self.orchestrator.stop(group)

    def is_running(self, installation: Installation) -> bool:
        """
        True while at least one launched process is alive. A group whose
        processes have all exited on their own is dropped from tracking.
        """
        key = process_utils.installation_key(installation)
        group = self.registry.get(key)
        if group is None:
            return False
        if any(process_utils.is_alive(proc) for proc in group):
            return True
        if self.registry.discard_if(key, group):
            log.info(f"{display_name(installation)} exited on its own.")
        return False

    def running(self) -> Dict[str, ProcessGroup]:
        """Returns every tracked group keyed by installation root."""
        return self.registry.snapshot()
