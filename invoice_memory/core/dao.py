"""
Memory store operations for the three memory kinds.

Every kind exposes the same shape: ``get_*`` returns records strongest
first, ``save_*`` creates a record or returns ``None`` when the write
carries no new information, ``reinforce_*`` raises confidence. Vendor and
correction memory can also lose confidence (``decay_vendor_memory`` and
``penalize_correction_memory``). Records are never deleted.
"""

from datetime import datetime
from typing import List, Optional

from . import confidence
from .config import (
    VENDOR_INITIAL_CONFIDENCE,
    CORRECTION_INITIAL_CONFIDENCE,
    RESOLUTION_INITIAL_CONFIDENCE,
    VENDOR_REINFORCE_STEP,
    VENDOR_DECAY_STEP,
    CORRECTION_REINFORCE_STEP,
    CORRECTION_PENALTY_STEP,
)
from .db import MemoryStore
from .schema import VendorMemoryRecord, CorrectionMemoryRecord, ResolutionMemoryRecord
from ..util.logging import logger

RESOLUTION_OUTCOMES = ("approved", "rejected")


# Vendor memory

def get_vendor_memory(store: MemoryStore, vendor: str, pattern: str = None) -> List[VendorMemoryRecord]:
    """All learned patterns for a vendor, highest confidence first."""
    with store.get_db() as conn:
        if pattern is None:
            rows = conn.execute(
                "SELECT * FROM vendor_memory WHERE vendor = ? ORDER BY confidence DESC, id ASC",
                (vendor,)
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM vendor_memory WHERE vendor = ? AND pattern = ? ORDER BY confidence DESC, id ASC",
                (vendor, pattern)
            ).fetchall()
    return [VendorMemoryRecord.from_row(row) for row in rows]


def get_vendor_memory_by_id(store: MemoryStore, record_id: int) -> Optional[VendorMemoryRecord]:
    with store.get_db() as conn:
        row = conn.execute("SELECT * FROM vendor_memory WHERE id = ?", (record_id,)).fetchone()
    return VendorMemoryRecord.from_row(row) if row else None


def save_vendor_memory(store: MemoryStore, vendor: str, pattern: str, meaning: str) -> Optional[VendorMemoryRecord]:
    """Store a new vendor pattern. No-op if (vendor, pattern) is already known."""
    now = datetime.now().isoformat()

    with store.transaction():
        with store.get_db() as conn:
            exists = conn.execute(
                "SELECT id FROM vendor_memory WHERE vendor = ? AND pattern = ?",
                (vendor, pattern)
            ).fetchone()

            if exists:
                logger.log_memory_operation("vendor_memory", "save", exists["id"],
                                            {"vendor": vendor, "pattern": pattern}, status="duplicate")
                return None

            cursor = conn.execute(
                '''INSERT INTO vendor_memory
                   (vendor, pattern, meaning, confidence, usage_count, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)''',
                (vendor, pattern, meaning, confidence.clamp(VENDOR_INITIAL_CONFIDENCE), 0, now, now)
            )
            record_id = cursor.lastrowid

    logger.log_memory_operation("vendor_memory", "saved", record_id,
                                {"vendor": vendor, "pattern": pattern, "meaning": meaning})
    return get_vendor_memory_by_id(store, record_id)


def _adjust_vendor_memory(store: MemoryStore, record_id: int, step: float, operation: str) -> Optional[VendorMemoryRecord]:
    now = datetime.now().isoformat()

    with store.transaction():
        record = get_vendor_memory_by_id(store, record_id)
        if record is None:
            logger.warning(f"Vendor memory {record_id} not found, {operation} skipped")
            return None

        if step >= 0:
            new_confidence = confidence.reinforce(record.confidence, step)
            usage_count = record.usage_count + 1
        else:
            new_confidence = confidence.decay(record.confidence, -step)
            usage_count = record.usage_count

        with store.get_db() as conn:
            conn.execute(
                "UPDATE vendor_memory SET confidence = ?, usage_count = ?, updated_at = ? WHERE id = ?",
                (new_confidence, usage_count, now, record_id)
            )

    logger.log_memory_operation("vendor_memory", operation, record_id,
                                {"from": record.confidence, "to": new_confidence})
    return get_vendor_memory_by_id(store, record_id)


def reinforce_vendor_memory(store: MemoryStore, record_id: int) -> Optional[VendorMemoryRecord]:
    """Raise confidence by the vendor step and count the usage."""
    return _adjust_vendor_memory(store, record_id, VENDOR_REINFORCE_STEP, "reinforced")


def decay_vendor_memory(store: MemoryStore, record_id: int) -> Optional[VendorMemoryRecord]:
    """Lower confidence when the pattern led to wrong behaviour."""
    return _adjust_vendor_memory(store, record_id, -VENDOR_DECAY_STEP, "decayed")


# Correction memory

def get_correction_memory(store: MemoryStore, vendor: Optional[str], issue_type: str) -> List[CorrectionMemoryRecord]:
    """Correction strategies for an issue type, highest confidence first.

    A falsy vendor selects the global (vendor-less) strategies.
    """
    with store.get_db() as conn:
        if vendor:
            rows = conn.execute(
                '''SELECT * FROM correction_memory
                   WHERE vendor = ? AND issue_type = ?
                   ORDER BY confidence DESC, id ASC''',
                (vendor, issue_type)
            ).fetchall()
        else:
            rows = conn.execute(
                '''SELECT * FROM correction_memory
                   WHERE vendor IS NULL AND issue_type = ?
                   ORDER BY confidence DESC, id ASC''',
                (issue_type,)
            ).fetchall()
    return [CorrectionMemoryRecord.from_row(row) for row in rows]


def get_correction_memory_by_id(store: MemoryStore, record_id: int) -> Optional[CorrectionMemoryRecord]:
    with store.get_db() as conn:
        row = conn.execute("SELECT * FROM correction_memory WHERE id = ?", (record_id,)).fetchone()
    return CorrectionMemoryRecord.from_row(row) if row else None


def save_correction_memory(store: MemoryStore, vendor: Optional[str], issue_type: str,
                           action: str) -> Optional[CorrectionMemoryRecord]:
    """Store a correction strategy. No-op if (vendor, issue_type, action) exists."""
    vendor = vendor or None
    now = datetime.now().isoformat()

    with store.transaction():
        with store.get_db() as conn:
            exists = conn.execute(
                "SELECT id FROM correction_memory WHERE vendor IS ? AND issue_type = ? AND action = ?",
                (vendor, issue_type, action)
            ).fetchone()

            if exists:
                logger.log_memory_operation("correction_memory", "save", exists["id"],
                                            {"vendor": vendor, "issue_type": issue_type}, status="duplicate")
                return None

            cursor = conn.execute(
                '''INSERT INTO correction_memory
                   (vendor, issue_type, action, confidence, reinforcement_count, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)''',
                (vendor, issue_type, action, confidence.clamp(CORRECTION_INITIAL_CONFIDENCE), 0, now, now)
            )
            record_id = cursor.lastrowid

    logger.log_memory_operation("correction_memory", "saved", record_id,
                                {"vendor": vendor, "issue_type": issue_type, "action": action})
    return get_correction_memory_by_id(store, record_id)


def _adjust_correction_memory(store: MemoryStore, record_id: int, step: float,
                              operation: str) -> Optional[CorrectionMemoryRecord]:
    now = datetime.now().isoformat()

    with store.transaction():
        record = get_correction_memory_by_id(store, record_id)
        if record is None:
            logger.warning(f"Correction memory {record_id} not found, {operation} skipped")
            return None

        if step >= 0:
            new_confidence = confidence.reinforce(record.confidence, step)
            count = record.reinforcement_count + 1
        else:
            new_confidence = confidence.decay(record.confidence, -step)
            count = record.reinforcement_count

        with store.get_db() as conn:
            conn.execute(
                "UPDATE correction_memory SET confidence = ?, reinforcement_count = ?, updated_at = ? WHERE id = ?",
                (new_confidence, count, now, record_id)
            )

    logger.log_memory_operation("correction_memory", operation, record_id,
                                {"from": record.confidence, "to": new_confidence})
    return get_correction_memory_by_id(store, record_id)


def reinforce_correction_memory(store: MemoryStore, record_id: int) -> Optional[CorrectionMemoryRecord]:
    """Raise confidence when a correction is reused successfully."""
    return _adjust_correction_memory(store, record_id, CORRECTION_REINFORCE_STEP, "reinforced")


def penalize_correction_memory(store: MemoryStore, record_id: int) -> Optional[CorrectionMemoryRecord]:
    """Lower confidence when a correction is rejected."""
    return _adjust_correction_memory(store, record_id, -CORRECTION_PENALTY_STEP, "penalized")


# Resolution memory

def get_resolution_memory(store: MemoryStore, vendor: Optional[str], issue_type: str) -> List[ResolutionMemoryRecord]:
    """Resolution history for an issue type, most recent first."""
    with store.get_db() as conn:
        if vendor:
            rows = conn.execute(
                '''SELECT * FROM resolution_memory
                   WHERE vendor = ? AND issue_type = ?
                   ORDER BY created_at DESC, id DESC''',
                (vendor, issue_type)
            ).fetchall()
        else:
            rows = conn.execute(
                '''SELECT * FROM resolution_memory
                   WHERE vendor IS NULL AND issue_type = ?
                   ORDER BY created_at DESC, id DESC''',
                (issue_type,)
            ).fetchall()
    return [ResolutionMemoryRecord.from_row(row) for row in rows]


def get_resolution_memory_by_id(store: MemoryStore, record_id: int) -> Optional[ResolutionMemoryRecord]:
    with store.get_db() as conn:
        row = conn.execute("SELECT * FROM resolution_memory WHERE id = ?", (record_id,)).fetchone()
    return ResolutionMemoryRecord.from_row(row) if row else None


def save_resolution_memory(store: MemoryStore, vendor: Optional[str], issue_type: str,
                           resolution: str) -> Optional[ResolutionMemoryRecord]:
    """Record a resolution outcome unless it contradicts the latest one for the key.

    The first recorded outcome for (vendor, issue_type) wins; a conflicting
    outcome is dropped without error.
    """
    if resolution not in RESOLUTION_OUTCOMES:
        raise ValueError(f"resolution must be one of: {list(RESOLUTION_OUTCOMES)}")

    vendor = vendor or None
    now = datetime.now().isoformat()

    with store.transaction():
        with store.get_db() as conn:
            existing = conn.execute(
                '''SELECT id, resolution FROM resolution_memory
                   WHERE vendor IS ? AND issue_type = ?
                   ORDER BY created_at DESC, id DESC
                   LIMIT 1''',
                (vendor, issue_type)
            ).fetchone()

            if existing and existing["resolution"] != resolution:
                logger.log_memory_operation("resolution_memory", "rejected_contradiction", existing["id"],
                                            {"vendor": vendor, "issue_type": issue_type,
                                             "stored": existing["resolution"], "rejected": resolution},
                                            status="rejected")
                return None

            cursor = conn.execute(
                '''INSERT INTO resolution_memory
                   (vendor, issue_type, resolution, confidence, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)''',
                (vendor, issue_type, resolution, confidence.clamp(RESOLUTION_INITIAL_CONFIDENCE), now, now)
            )
            record_id = cursor.lastrowid

    logger.log_memory_operation("resolution_memory", "saved", record_id,
                                {"vendor": vendor, "issue_type": issue_type, "resolution": resolution})
    return get_resolution_memory_by_id(store, record_id)


def reinforce_resolution_memory(store: MemoryStore, record_id: int) -> Optional[ResolutionMemoryRecord]:
    """Raise confidence of a resolution record by the vendor step."""
    now = datetime.now().isoformat()

    with store.transaction():
        record = get_resolution_memory_by_id(store, record_id)
        if record is None:
            logger.warning(f"Resolution memory {record_id} not found, reinforce skipped")
            return None

        new_confidence = confidence.reinforce(record.confidence, VENDOR_REINFORCE_STEP)
        with store.get_db() as conn:
            conn.execute(
                "UPDATE resolution_memory SET confidence = ?, updated_at = ? WHERE id = ?",
                (new_confidence, now, record_id)
            )

    logger.log_memory_operation("resolution_memory", "reinforced", record_id,
                                {"from": record.confidence, "to": new_confidence})
    return get_resolution_memory_by_id(store, record_id)
