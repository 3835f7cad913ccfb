"""
SQLite database connection and initialization.
"""
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List
from contextlib import contextmanager

from .config import DB_PATH, SCHEMA_FILE
from .exceptions import StorageError

logger = logging.getLogger(__name__)


def utc_now() -> str:
    """Timestamp format stored in every *_at column."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class Database:
    """Database manager for SQLite operations."""

    def __init__(self, db_path: Path = DB_PATH, schema_file: Path = SCHEMA_FILE):
        self.db_path = Path(db_path)
        self.schema_file = schema_file
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.ensure_tables()

    @contextmanager
    def get_connection(self):
        """Context manager for database connections."""
        conn = self.get_connection_raw()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database error on {self.db_path}: {e}", exc_info=True)
            raise StorageError() from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_connection_raw(self) -> sqlite3.Connection:
        """Get a raw connection (for operations that need manual commit)."""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=10)
        except sqlite3.Error as e:
            logger.error(f"Cannot open database {self.db_path}: {e}")
            raise StorageError() from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def ensure_tables(self):
        """Create all tables if they don't exist."""
        if self.schema_file.exists():
            schema = self.schema_file.read_text()
            with self.get_connection() as conn:
                conn.executescript(schema)
        else:
            logger.warning(f"Schema file not found at {self.schema_file}")

    def execute(self, query: str, params: Optional[tuple] = None) -> List[sqlite3.Row]:
        """Execute a SELECT query and return results."""
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())
            return cursor.fetchall()

    def execute_one(self, query: str, params: Optional[tuple] = None) -> Optional[sqlite3.Row]:
        """Execute a SELECT query and return first result."""
        results = self.execute(query, params)
        return results[0] if results else None

    def execute_write(self, query: str, params: Optional[tuple] = None) -> int:
        """Execute an INSERT query and return last row ID."""
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())
            return cursor.lastrowid

    def execute_update(self, query: str, params: Optional[tuple] = None) -> int:
        """Execute an UPDATE/DELETE query and return the number of affected rows."""
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())
            return cursor.rowcount
