"""
Local package for the ModLaunch application.

This package provides application-level configuration through the
app_globals object, plus the launcher, console and storage helpers.
"""

from .config import effective_settings as app_globals

__all__ = ["app_globals"]
