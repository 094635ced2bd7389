"""
Append-only audit trail of pipeline activity per invoice.

Any row for an invoice id also marks that invoice as already learned from.
"""

from datetime import datetime
from typing import List

from .db import MemoryStore
from .schema import AuditTrailEntry
from ..util.logging import logger

AUDIT_STEPS = ("recall", "apply", "decide", "learn")


def record_audit(store: MemoryStore, invoice_id: str, step: str, details: str, timestamp: str = None) -> int:
    """Append an audit entry and return its row id."""
    if step not in AUDIT_STEPS:
        raise ValueError(f"step must be one of: {list(AUDIT_STEPS)}")

    timestamp = timestamp or datetime.now().isoformat()

    with store.get_db() as conn:
        cursor = conn.execute(
            "INSERT INTO audit_trail (invoice_id, step, details, timestamp) VALUES (?, ?, ?, ?)",
            (invoice_id, step, details, timestamp)
        )
        entry_id = cursor.lastrowid

    logger.log_audit_entry(invoice_id, step)
    return entry_id


def log_learn(store: MemoryStore, invoice_id: str, details: str, timestamp: str = None) -> int:
    return record_audit(store, invoice_id, "learn", details, timestamp)


def has_audit_entries(store: MemoryStore, invoice_id: str) -> bool:
    """True if anything at all was recorded for the invoice."""
    with store.get_db() as conn:
        row = conn.execute("SELECT 1 FROM audit_trail WHERE invoice_id = ? LIMIT 1", (invoice_id,)).fetchone()
    return row is not None


def get_audit_trail(store: MemoryStore, invoice_id: str) -> List[AuditTrailEntry]:
    """Audit entries for an invoice in insertion order."""
    with store.get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM audit_trail WHERE invoice_id = ? ORDER BY id ASC",
            (invoice_id,)
        ).fetchall()
    return [AuditTrailEntry.from_row(row) for row in rows]
