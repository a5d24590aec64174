import logging
from typing import List
from modlaunch.local.launcher import LaunchMode
from modlaunch.local.console.handler import (
    display_games, display_status, handle_add_command, handle_config_command,
    handle_launch_command, handle_logs_command, handle_remove_command,
    handle_stop_command, print_help, toggle_verbose_logging,
)

log = logging.getLogger(__name__)


def execute_command(command: str, args: List[str]) -> bool:
    """
    Executes a single command from the user.

    :param command: The main command string (e.g., 'modded', 'config').
    :param args: A list of arguments for the command.
    :return bool: True if the console should exit, False otherwise.
    """
    log.debug(f"Executing command: {command}, args: {args}")
    command_map = {
        "games": display_games,
        "add": lambda: handle_add_command(args),
        "remove": lambda: handle_remove_command(args),
        "vanilla": lambda: handle_launch_command(LaunchMode.VANILLA, args),
        "modded": lambda: handle_launch_command(LaunchMode.MODDED, args),
        "stop": lambda: handle_stop_command(args),
        "status": display_status,
        "logs": handle_logs_command,
        "config": lambda: handle_config_command(args),
        "verbose": toggle_verbose_logging,
        "help": print_help,
    }

    if command in ("exit", "quit"):
        return True
    if command in command_map:
        command_map[command]()
    else:
        log.info(f"Unknown command: '{command}'. Type 'help' for a list of commands.")
    return False
