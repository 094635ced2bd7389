"""
SQLite persistence - the store handle shared by every pipeline stage.
"""

import sqlite3
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from .config import DB_PATH, ensure_db_directory
from .errors import MemoryStoreError
from ..util.logging import logger

TABLES = ("vendor_memory", "correction_memory", "resolution_memory", "audit_trail")


class MemoryStore:
    """Handle on the durable memory database.

    One connection is held per store so that ``":memory:"`` databases keep
    their contents between calls. The connection is shared by API worker
    threads, so every use of it happens under ``_lock``; an open
    ``transaction()`` holds the lock until it commits or rolls back, which
    keeps one thread's transaction from absorbing another thread's writes.
    Schema creation is idempotent and runs on construction.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or DB_PATH
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._tx_depth = 0
        self.init_db()

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            ensure_db_directory(self.db_path)
            try:
                self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            except sqlite3.Error as e:
                logger.error(f"Failed to open memory database '{self.db_path}': {e}")
                raise MemoryStoreError(f"Cannot open memory database: {e}") from e
            self._conn.row_factory = sqlite3.Row
        return self._conn

    @contextmanager
    def get_db(self) -> Generator[sqlite3.Connection, None, None]:
        """Yield the connection; commit unless a transaction is open."""
        with self._lock:
            conn = self._connect()
            try:
                yield conn
                if self._tx_depth == 0:
                    conn.commit()
            except sqlite3.Error as e:
                if self._tx_depth == 0:
                    conn.rollback()
                logger.error(f"Memory store operation failed: {e}")
                raise MemoryStoreError(str(e)) from e

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Group several writes into one commit. Nested blocks join the outer one.

        Other threads block until the outermost block finishes.
        """
        with self._lock:
            conn = self._connect()
            self._tx_depth += 1
            try:
                yield conn
            except Exception:
                self._tx_depth -= 1
                if self._tx_depth == 0:
                    conn.rollback()
                raise
            else:
                self._tx_depth -= 1
                if self._tx_depth == 0:
                    try:
                        conn.commit()
                    except sqlite3.Error as e:
                        conn.rollback()
                        logger.error(f"Memory store commit failed: {e}")
                        raise MemoryStoreError(str(e)) from e

    def init_db(self):
        """Initialize the database with required tables."""
        with self.get_db() as conn:
            cursor = conn.cursor()

            # Vendor-specific learned field patterns
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS vendor_memory (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    vendor TEXT NOT NULL,
                    pattern TEXT NOT NULL,
                    meaning TEXT NOT NULL,
                    confidence REAL NOT NULL,
                    usage_count INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT,
                    updated_at TEXT
                )
            ''')

            # Recurring correction strategies, vendor NULL = global
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS correction_memory (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    vendor TEXT,
                    issue_type TEXT NOT NULL,
                    action TEXT NOT NULL,
                    confidence REAL NOT NULL,
                    reinforcement_count INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT,
                    updated_at TEXT
                )
            ''')

            # Final outcomes of recurring issues
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS resolution_memory (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    vendor TEXT,
                    issue_type TEXT NOT NULL,
                    resolution TEXT NOT NULL,  -- approved | rejected
                    confidence REAL NOT NULL,
                    created_at TEXT,
                    updated_at TEXT
                )
            ''')

            # Append-only pipeline log, also the learning idempotency guard
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS audit_trail (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    invoice_id TEXT NOT NULL,
                    step TEXT NOT NULL,  -- recall | apply | decide | learn
                    details TEXT,
                    timestamp TEXT
                )
            ''')

            # Create indexes for lookups
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_vendor_memory_vendor ON vendor_memory(vendor, pattern)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_correction_memory_key ON correction_memory(vendor, issue_type)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_resolution_memory_key ON resolution_memory(vendor, issue_type)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_audit_trail_invoice ON audit_trail(invoice_id)')

    def health_check(self) -> bool:
        """Check that every required table exists."""
        try:
            with self.get_db() as conn:
                rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        except MemoryStoreError:
            return False

        table_names = {row[0] for row in rows}
        return all(table in table_names for table in TABLES)

    def count(self, table: str) -> int:
        """Row count of one of the memory tables."""
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        with self.get_db() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

    def close(self):
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
