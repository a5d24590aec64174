"""
The launcher package.
Starts games in vanilla or modded mode and stops them again.

GameLauncher is the entry point. The helper modules resolve what to run,
hide the plugin directory for vanilla launches, track the spawned processes
and shut them down gracefully or forcefully.
"""
from .launcher import GameLauncher
from .models import ErrorCategory, Installation, LaunchMode, LaunchOutcome
from .registry import ProcessRegistry
from .shutdown import ShutdownOrchestrator

__all__ = [
    'GameLauncher', 'ProcessRegistry', 'ShutdownOrchestrator',
    'Installation', 'LaunchMode', 'LaunchOutcome', 'ErrorCategory',
]
