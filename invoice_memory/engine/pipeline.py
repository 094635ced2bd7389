"""
Pipeline orchestration - sequences recall → apply → decide, and learn once
human feedback arrives, for one invoice at a time.
"""

from typing import Optional

from ..core.audit import get_audit_trail
from ..core.db import MemoryStore
from ..core.schema import DecisionResult, LearnResult
from ..api.schemas import Invoice, HumanFeedback, AgentOutput, AuditTrailItem
from ..util.logging import logger
from .recall import recall_memory
from .apply import apply_memory
from .decide import decide
from .learn import learn


def process_invoice(store: MemoryStore, invoice: Invoice) -> DecisionResult:
    """Run recall, apply and decide for an invoice.

    Steps are logged but not written to the audit trail: an audit row would
    mark the invoice as already learned.
    """
    recalled = recall_memory(store, invoice)
    logger.log_pipeline_step(invoice.invoice_id, "recall", {
        "vendor_memory": len(recalled.vendor_memory),
        "correction_memory": len(recalled.correction_memory),
        "resolution_memory": len(recalled.resolution_memory),
    })

    applied = apply_memory(invoice, recalled)
    logger.log_pipeline_step(invoice.invoice_id, "apply", {
        "confidence_score": applied.confidence_score,
        "proposed_corrections": len(applied.proposed_corrections),
    })
    for line in applied.reasoning:
        logger.debug(f"{invoice.invoice_id}: {line}")

    decision = decide(applied)
    logger.log_pipeline_step(invoice.invoice_id, "decide", {
        "requires_human_review": decision.requires_human_review,
        "confidence_score": decision.confidence_score,
    })
    return decision


def build_agent_output(store: MemoryStore, invoice: Invoice, decision: DecisionResult,
                       learn_result: Optional[LearnResult] = None) -> AgentOutput:
    """Assemble the consumer-facing result, including the invoice's audit trail."""
    audit_trail = [
        AuditTrailItem(step=entry.step, timestamp=entry.timestamp, details=entry.details)
        for entry in get_audit_trail(store, invoice.invoice_id)
    ]

    return AgentOutput(
        invoice_id=invoice.invoice_id,
        normalized_invoice=decision.normalized_invoice,
        proposed_corrections=decision.proposed_corrections,
        requires_human_review=decision.requires_human_review,
        reasoning=decision.reasoning,
        confidence_score=decision.confidence_score,
        memory_updates=learn_result.memory_updates if learn_result else [],
        audit_trail=audit_trail,
    )


def run_feedback(store: MemoryStore, invoice: Invoice, feedback: HumanFeedback) -> AgentOutput:
    """Learn from feedback, then re-evaluate the invoice against the updated memory."""
    learn_result = learn(store, invoice, feedback)
    decision = process_invoice(store, invoice)
    return build_agent_output(store, invoice, decision, learn_result)
