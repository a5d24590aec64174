"""
This module contains the configuration settings for the ModLaunch application.
It defines paths, launcher behaviour, shutdown timeouts and logging settings.
It is used throughout the application to ensure consistent settings and paths.
"""

import os
import pathlib
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv(override=True)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('true', '1', 't', 'yes', 'y')


#* --- Core Paths ---
BASE_DIR = pathlib.Path(__file__).resolve().parent.parent  # Project Root
DATA_DIR = pathlib.Path(os.getenv("MODLAUNCH_DATA_DIR", str(BASE_DIR / "data")))
LOGS_DIR = pathlib.Path(os.getenv("MODLAUNCH_LOGS_DIR", str(BASE_DIR / "logs")))

#* --- Application File Paths ---
LOG_DB_PATH = LOGS_DIR / "launcher_logs.db"
OVERRIDES_JSON_PATH = DATA_DIR / "overrides.json"
INSTALLATIONS_JSON_PATH = DATA_DIR / "installations.json"

#* --- Mod Loader Layout ---
# These must match the layout produced by the BepInEx installer.
MOD_LOADER_DIR_NAME = "BepInEx"
DEFAULT_MOD_DIRECTORY = "BepInEx/plugins"
MOD_LOADER_PROXY_FILES = ("winhttp.dll", "doorstop_config.ini", "run_bepinex.sh")
LAUNCH_SCRIPT_NAME = "run_bepinex.sh"
LAUNCH_SCRIPT_SHELL = os.getenv("LAUNCH_SCRIPT_SHELL", "bash")
HIDDEN_DIR_SUFFIX = "_disabled"

#* --- Launcher/Shutdown Settings ---
GRACEFUL_SHUTDOWN_TIMEOUT = 5  # seconds before force-killing
KILL_REAP_TIMEOUT = 3          # seconds to wait for the OS after a kill
CAPTURE_PROCESS_OUTPUT = _env_flag("CAPTURE_PROCESS_OUTPUT", "True")
# Off Windows there is no window to close; opt in to SIGTERM as the close request.
POSIX_SIGTERM_CLOSE = _env_flag("POSIX_SIGTERM_CLOSE", "False")

#* --- Console Settings ---
CONSOLE_PROCESS_TITLE = "ModLaunch - Console"

#* --- Application variables ---
VERBOSE_LOGGING = False

#* --- MODIFIABLE SETTINGS (Changeable at runtime via 'config' command) ---
MODIFIABLE_SETTINGS = {
    # Shutdown
    "GRACEFUL_SHUTDOWN_TIMEOUT", "KILL_REAP_TIMEOUT", "POSIX_SIGTERM_CLOSE",
    # Launching
    "CAPTURE_PROCESS_OUTPUT", "LAUNCH_SCRIPT_SHELL",
    # Logging
    "LOG_BUFFER_SIZE", "LOG_BUFFER_FLUSH_INTERVAL", "LOG_HISTORY_COUNT",
}

#* --- Default Values for Modifiable Settings ---
LOG_BUFFER_SIZE = 100
LOG_BUFFER_FLUSH_INTERVAL = 10
LOG_HISTORY_COUNT = 50
