"""
Database transaction management with rollback support.
"""
import logging
import sqlite3
from typing import Optional
from contextlib import contextmanager

from core.database import Database
from core.exceptions import StorageError

logger = logging.getLogger(__name__)


class TransactionManager:
    """Runs a block of statements as one all-or-nothing unit of work."""

    def __init__(self, db: Database):
        self.db = db

    @contextmanager
    def transaction(self, isolation_level: Optional[str] = None):
        """
        Context manager for database transactions.

        Usage:
            with transaction_manager.transaction("IMMEDIATE") as conn:
                conn.execute(...)
                conn.execute(...)
                # If exception raised, all writes rolled back

        Args:
            isolation_level: Optional SQLite locking mode
                - None: Default (DEFERRED), used for consistent reads
                - "IMMEDIATE": Take the write lock up front
                - "EXCLUSIVE": Exclusive lock

        Yields:
            Connection object with an open transaction

        Raises:
            StorageError: on any sqlite3 failure (after rollback)
        """
        conn = self.db.get_connection_raw()
        # Manual transaction control
        conn.isolation_level = None

        try:
            conn.execute(f"BEGIN {isolation_level or 'DEFERRED'}")

            yield conn

            conn.execute("COMMIT")

        except sqlite3.Error as e:
            self._rollback(conn)
            logger.error(f"Transaction rolled back: {e}", exc_info=True)
            raise StorageError() from e

        except Exception:
            self._rollback(conn)
            raise

        finally:
            conn.close()

    @staticmethod
    def _rollback(conn: sqlite3.Connection):
        if conn.in_transaction:
            conn.execute("ROLLBACK")
