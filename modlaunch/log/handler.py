import sys
import sqlite3
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
from modlaunch.local import app_globals
from modlaunch.local.database import LogDBManager


class SQLiteHandler(logging.Handler):
    """
    A custom logging handler that writes logs to a SQLite database
    in batches using a background thread.
    """
    def __init__(self, db_path: Path):
        """
        Initializes the SQLite handler.

        :param db_path: The path to the SQLite database file.
        """
        super().__init__()
        self.db_path = db_path
        self.log_buffer: List[Dict[str, Any]] = []
        self.buffer_lock = threading.Lock()
        self.flush_thread: Optional[threading.Thread] = None
        self.stop_event = threading.Event()
        self.logDB = LogDBManager(self.db_path)
        self.logDB.initialize_database()
        self._start_flush_thread()

    def _start_flush_thread(self) -> None:
        """Starts the background thread that periodically flushes logs to the database."""
        self.flush_thread = threading.Thread(target=self._periodic_flush, daemon=True)
        self.flush_thread.name = "SQLiteFlushThread"
        self.flush_thread.start()

    def _periodic_flush(self) -> None:
        """Periodically flushes the log buffer. This runs in a background thread."""
        while not self.stop_event.wait(app_globals.LOG_BUFFER_FLUSH_INTERVAL):
            self.flush()

    def emit(self, record: logging.LogRecord) -> None:
        """
        Adds a log record to the internal buffer for batch writing.

        :param record: The log record to be processed.
        """
        # Game output has no meaningful module/function, so label it by stream.
        if record.name.startswith('proc.'):
            module = record.name.split('.', 1)[-1]
            func_name = 'stdout' if record.levelno == logging.INFO else 'stderr'
            lineno = 0
        else:
            module = record.module
            func_name = record.funcName
            lineno = record.lineno

        log_entry = {
            "timestamp": record.created,
            "level": record.levelname,
            "module": module,
            "funcName": func_name,
            "lineno": lineno,
            "message": record.getMessage()
        }
        with self.buffer_lock:
            self.log_buffer.append(log_entry)
            should_flush = len(self.log_buffer) >= app_globals.LOG_BUFFER_SIZE
        if should_flush:
            self.flush()

    def flush(self) -> None:
        """Writes the buffered logs to the database."""
        with self.buffer_lock:
            if not self.log_buffer:
                return
            entries_to_write = list(self.log_buffer)
            self.log_buffer.clear()

        try:
            self.logDB.insert_log_batch(entries_to_write)
        except sqlite3.Error as e:
            print(f"Error writing logs to DB: {e}. Log entries: {len(entries_to_write)}", file=sys.stderr)

    def close(self) -> None:
        """Shuts down the handler, ensuring the flush thread is joined and buffers are flushed."""
        self.stop_event.set()
        if self.flush_thread and self.flush_thread.is_alive():
            self.flush_thread.join()
        self.flush()
        super().close()
