"""
Logging module for the application.
This module sets up console logging and the SQLite log store.
"""

from .setup import setup_logging

__all__ = ["setup_logging"]
