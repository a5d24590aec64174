import logging
from typing import List, Optional

from modlaunch.local import app_globals
from modlaunch.local.bepinex import is_bepinex_installed
from modlaunch.local.database import LogDBManager
from modlaunch.local.installations import InstallationStore
from modlaunch.local.launcher import GameLauncher, Installation, LaunchMode, LaunchOutcome
from modlaunch.local.launcher.process_utils import describe, get_proc_status_string, installation_key

log = logging.getLogger(__name__)
launcher = GameLauncher()
store = InstallationStore()


def _print_outcome(outcome: LaunchOutcome) -> None:
    if outcome.success:
        print(f"OK: {outcome.message}")
    else:
        print(f"ERROR [{outcome.category.value}]: {outcome.message} - {outcome.error}")

def _lookup(args: List[str], usage: str) -> Optional[Installation]:
    """Returns the installation named by the first argument, printing why if there is none."""
    if not args:
        print(f"Usage: {usage}")
        return None
    installation = store.get(args[0])
    if installation is None:
        print(f"Unknown game '{args[0]}'. Use 'games' to list known installations.")
    return installation

def handle_launch_command(mode: LaunchMode, args: List[str]) -> None:
    """Handles the 'vanilla' and 'modded' commands."""
    installation = _lookup(args, f"{mode.value} <name>")
    if installation is None:
        return
    if launcher.is_running(installation):
        print(f"Warning: {installation.name} is already running; the earlier processes will no longer be tracked.")
    _print_outcome(launcher.launch(installation, mode))

def handle_stop_command(args: List[str]) -> None:
    """Handles the 'stop' command."""
    installation = _lookup(args, "stop <name>")
    if installation is None:
        return
    print(f"Stopping {installation.name}...")
    _print_outcome(launcher.stop(installation))

def handle_add_command(args: List[str]) -> None:
    """Handles 'add <name> <install_path> <executable> [mod_directory]'."""
    if len(args) < 3:
        print("Usage: add <name> <install_path> <executable> [mod_directory]")
        return
    name, install_path, executable = args[0], args[1], args[2]
    mod_directory = args[3] if len(args) > 3 else None
    try:
        installation = store.add(name, install_path, executable, mod_directory)
    except ValueError as e:
        print(f"Error: {e}")
        return
    print(f"Added '{installation.name}' ({installation.install_path}).")

def handle_remove_command(args: List[str]) -> None:
    """Handles 'remove <name>'. Refuses while the game is tracked as running."""
    installation = _lookup(args, "remove <name>")
    if installation is None:
        return
    if launcher.is_running(installation):
        print(f"Error: {installation.name} is running. Stop it first.")
        return
    store.remove(installation.name)
    print(f"Removed '{installation.name}'.")

def display_games() -> None:
    """Lists known installations with their BepInEx and running state."""
    installations = store.all()
    if not installations:
        print("\nNo games configured. Use 'add' to register one.\n")
        return
    print("\n--- Games ---")
    for installation in installations:
        bepinex = "BepInEx" if is_bepinex_installed(installation) else "vanilla only"
        state = "RUNNING" if launcher.is_running(installation) else "stopped"
        print(f"  - {installation.name:<20} : {state:<8} | {bepinex:<12} | {installation.install_path}")
    print("-" * 13 + "\n")

def display_status() -> None:
    """Shows every process the launcher is tracking."""
    names = {installation_key(i): i.name for i in store.all()}
    running = launcher.running()
    if not running:
        print("\nNo games are being tracked.\n")
        return

    print("\n--- Launcher Status ---")
    for key, group in sorted(running.items()):
        print(f"  {names.get(key, key)}")
        for proc in group:
            print(f"    - {describe(proc):<40} : Status: {get_proc_status_string(proc).upper()}")
    print("-" * 23 + "\n")

def handle_logs_command() -> None:
    """Prints the most recent entries from the log database."""
    log_db = LogDBManager(app_globals.LOG_DB_PATH)
    entries = log_db.fetch_last_entries(app_globals.LOG_HISTORY_COUNT, app_globals.VERBOSE_LOGGING)
    print(f"\n--- Displaying last {len(entries)} log entries ---")
    for entry in entries:
        print(log_db.format_entry(entry))
    print()

def _config_show() -> None:
    print("\n--- Current Launcher Configuration ---")
    for key in sorted(app_globals.MODIFIABLE_SETTINGS):
        print(f"  {key} = {app_globals.get(key, 'N/A')}")
    print("---")
    print("Use 'config set <KEY> <VALUE>' to change a setting.")
    print("--------------------------------------\n")

def _config_help() -> None:
    print("\nConfig Command Help:")
    print("  config show                - Display all modifiable settings.")
    print("  config set KEY VALUE       - Change a setting and save it to overrides.json.")
    print("  config help                - Show this help message.")

def handle_config_command(args: List[str]) -> None:
    """
    Handles all sub-commands for the 'config' command-line interface.

    :param args: A list of string arguments following the 'config' command.
    """
    sub_command = args[0].lower() if args else "show"

    if sub_command == "show":
        _config_show()
    elif sub_command == "set":
        if len(args) < 3:
            print("Usage: config set <SETTING_NAME> <VALUE>")
            return
        _, message = app_globals.update_setting(args[1], " ".join(args[2:]))
        print(message)
    elif sub_command == "help":
        _config_help()
    else:
        print(f"Unknown config sub-command: '{sub_command}'. Type 'config help' for available commands.")

def toggle_verbose_logging() -> None:
    """Toggles verbose (DEBUG level) logging for the console handler."""
    app_globals.VERBOSE_LOGGING = not app_globals.VERBOSE_LOGGING
    new_level = logging.DEBUG if app_globals.VERBOSE_LOGGING else logging.INFO

    root_logger = logging.getLogger()
    found_handler = False
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setLevel(new_level)
            found_handler = True
            break

    status = "ON" if app_globals.VERBOSE_LOGGING else "OFF"
    if found_handler:
        print(f"Verbose console logging is now {status}.")
    else:
        print("Could not find console handler to modify level.")

def print_help() -> None:
    """Prints the main help text for the console."""
    print("\nAvailable commands:")
    print("  games                          - List configured games.")
    print("  add <name> <path> <exe> [dir]  - Register a game installation.")
    print("  remove <name>                  - Forget a game installation.")
    print("  vanilla <name>                 - Launch a game without plugins.")
    print("  modded <name>                  - Launch a game with BepInEx plugins.")
    print("  stop <name>                    - Close a launched game (forcefully after a timeout).")
    print("  status                         - Show the processes being tracked.")
    print("  logs                           - Show recent log entries.")
    print("  config <cmd>                   - Manage configuration. Use 'config help' for details.")
    print("  verbose                        - Toggle detailed DEBUG log output in the console.")
    print("  exit                           - Exit the console. Running games keep running.")
    print()
