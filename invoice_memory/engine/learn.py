"""
Learn - the only stage that writes memory.

Consumes human feedback on a decided invoice, creates or reinforces memory
records and appends audit entries. One invocation runs in one transaction.
"""

from datetime import datetime

from ..core.audit import has_audit_entries, log_learn
from ..core.dao import (
    get_vendor_memory,
    save_vendor_memory,
    reinforce_vendor_memory,
    get_correction_memory,
    save_correction_memory,
    reinforce_correction_memory,
    save_resolution_memory,
)
from ..core.db import MemoryStore
from ..core.schema import LearnResult
from ..api.schemas import Invoice, HumanFeedback, FieldCorrection
from ..util.logging import logger

FINAL_DECISION_ISSUE = "final_decision"


def is_vendor_specific(invoice: Invoice, correction: FieldCorrection) -> bool:
    """Date fields are treated as structural facts about the vendor's layout."""
    return bool(invoice.vendor) and "date" in correction.field.lower()


def learn(store: MemoryStore, invoice: Invoice, feedback: HumanFeedback) -> LearnResult:
    """Update memory from human feedback. Re-learning the same invoice is a no-op."""
    memory_updates = []
    now = datetime.now().isoformat()

    # Guard and writes share one transaction so concurrent feedback learns once
    with store.transaction():
        if has_audit_entries(store, invoice.invoice_id):
            logger.log_pipeline_step(invoice.invoice_id, "learn", {"skipped": "already learned"})
            return LearnResult(memory_updates=[
                f"Invoice {invoice.invoice_id} already learned. Skipping duplicate learning."
            ])

        for correction in feedback.corrections:
            field, to = correction.field, correction.to

            if is_vendor_specific(invoice, correction):
                existing = get_vendor_memory(store, invoice.vendor, pattern=field)
                if existing:
                    reinforce_vendor_memory(store, existing[0].id)
                    memory_updates.append(f"Reinforced vendor memory for {invoice.vendor}: {field}")
                else:
                    save_vendor_memory(store, invoice.vendor, field, str(to))
                    memory_updates.append(f"Learned vendor pattern for {invoice.vendor}: {field} → {to}")
            else:
                existing = get_correction_memory(store, invoice.vendor or None, field)
                if existing:
                    reinforce_correction_memory(store, existing[0].id)
                    memory_updates.append(f'Reinforced correction strategy for issue "{field}"')
                else:
                    save_correction_memory(store, invoice.vendor or None, field, correction.reason)
                    memory_updates.append(f'Learned correction strategy for issue "{field}": {correction.reason}')

            log_learn(
                store,
                invoice.invoice_id,
                f'Correction applied: field "{field}" changed from "{correction.from_value}" '
                f'to "{to}". Reason: {correction.reason}',
                timestamp=now,
            )

        # Dropped silently when it contradicts an earlier outcome
        save_resolution_memory(store, invoice.vendor or None, FINAL_DECISION_ISSUE, feedback.final_decision)
        memory_updates.append(f"Learned final resolution for vendor {invoice.vendor}: {feedback.final_decision}")

        log_learn(store, invoice.invoice_id, f"Final decision recorded: {feedback.final_decision}", timestamp=now)

    logger.log_pipeline_step(invoice.invoice_id, "learn", {"updates": len(memory_updates)})
    return LearnResult(memory_updates=memory_updates)
