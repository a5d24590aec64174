import time
import sqlite3
import logging
import threading
from pathlib import Path
from collections import namedtuple
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional, Tuple

LogEntry = namedtuple('LogEntry', ['timestamp', 'level', 'module', 'message'])
log = logging.getLogger(__name__)


class LogDBManager:
    """
    Manages all interactions with the launcher's logging SQLite database.
    """

    def __init__(self, db_path: Path, lock: Optional[threading.Lock] = None):
        """
        Initializes the LogDBManager.

        :param db_path: The path to the logging SQLite database file.
        :param lock: An optional lock serializing access to the database.
        """
        self.db_path = Path(db_path)
        self.lock = lock or threading.Lock()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Yields a new connection while holding the manager's lock."""
        with self.lock:
            conn = sqlite3.connect(self.db_path, timeout=10)
            try:
                yield conn
            finally:
                conn.close()

    def execute(self, sql: str, params: Optional[Tuple[Any, ...]] = None) -> List[Tuple[Any, ...]]:
        """
        Executes a raw SQL command and commits it.

        :return: All rows the statement produced.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(sql, params or ())
            conn.commit()
            return cursor.fetchall()

    def initialize_database(self) -> None:
        """Ensures the log table exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.execute('''
                CREATE TABLE IF NOT EXISTS logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp REAL,
                    level TEXT,
                    module TEXT,
                    funcName TEXT,
                    lineno INTEGER,
                    message TEXT
                )
            ''')
            log.debug("Log database table created/verified.")
        except sqlite3.Error as e:
            log.critical(f"Could not create log database table: {e}", exc_info=True)
            raise

    def insert_log_batch(self, entries: List[Dict[str, Any]]) -> None:
        """
        Inserts a batch of log records in one transaction.

        :raises sqlite3.Error: If the write fails.
        """
        if not entries:
            return
        rows = [
            (e["timestamp"], e["level"], e["module"], e["funcName"], e["lineno"], e["message"])
            for e in entries
        ]
        with self._get_connection() as conn:
            conn.executemany(
                "INSERT INTO logs (timestamp, level, module, funcName, lineno, message) VALUES (?, ?, ?, ?, ?, ?)",
                rows,
            )
            conn.commit()

    def fetch_last_entries(self, count: int, include_debug: bool = False) -> List[LogEntry]:
        """
        Returns the most recent log entries, oldest first.

        :param count: How many entries to return.
        :param include_debug: Whether DEBUG records are included.
        """
        sql = "SELECT timestamp, level, module, message FROM logs"
        if not include_debug:
            sql += " WHERE level != 'DEBUG'"
        sql += " ORDER BY id DESC LIMIT ?"
        try:
            rows = self.execute(sql, (count,))
        except sqlite3.Error as e:
            log.error(f"Failed to fetch log entries: {e}")
            return []
        return [LogEntry(*row) for row in reversed(rows)]

    def format_entry(self, entry: LogEntry) -> str:
        stamp = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(entry.timestamp))
        return f"{stamp} - {entry.level:<8} - [{entry.module}] - {entry.message}"
