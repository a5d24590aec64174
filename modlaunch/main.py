import sys
import logging
import setproctitle

# Basic console logger for messages BEFORE full setup is complete.
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)-8s - [console] - %(message)s',
    stream=sys.stdout
)
log = logging.getLogger("console")

import modlaunch.local.console as console
from modlaunch.local import app_globals
from modlaunch.log.setup import setup_logging


def main() -> None:
    """The main entry point for the console application."""
    setproctitle.setproctitle(app_globals.CONSOLE_PROCESS_TITLE)
    setup_logging(logging.INFO)

    # Non-interactive mode for one-off commands
    if len(sys.argv) > 1:
        command, args = sys.argv[1].lower(), sys.argv[2:]
        if "--verbose" in args:
            console.toggle_verbose_logging()
            args.remove("--verbose")
        console.execute_command(command, args)
        return

    print("--- Game Launcher Console ---")
    print("Type 'help' for a list of commands.")
    while True:
        try:
            command_line_str = input("> ").strip()
            if not command_line_str:
                continue
            command_line = command_line_str.split()
            command, args = command_line[0].lower(), command_line[1:]
            log.debug(f"Received command: {command}, args: {args}")

            if console.execute_command(command, args):
                break

        except (KeyboardInterrupt, EOFError):
            log.warning("\nExiting console due to interrupt.")
            break
        except Exception as e:
            log.error(f"An unexpected error occurred in the console: {e}", exc_info=True)

    logging.shutdown()


if __name__ == "__main__":
    main()
    print("Exiting launcher console. Running games were left running.")
