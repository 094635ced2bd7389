"""
Apply - turn recalled memory into suggestions for one invoice.

Confidence tiers, shared by all memory kinds:
- below IGNORE_BELOW: ignored entirely
- IGNORE_BELOW up to STRONG_AT: weak, reasoning only
- STRONG_AT and above: strong, vendor patterns are written into the
  normalized fields

Nothing is written to the store here.
"""

from ..core.config import IGNORE_BELOW, STRONG_AT
from ..core.confidence import average
from ..core.schema import ApplyResult, RecalledMemory
from ..api.schemas import Invoice


def _strength(confidence: float) -> str:
    return "strong" if confidence >= STRONG_AT else "weak"


def apply_memory(invoice: Invoice, recalled: RecalledMemory) -> ApplyResult:
    """Produce normalized fields, proposed corrections, reasoning and a confidence score."""
    normalized_invoice = dict(invoice.fields)
    proposed_corrections = []
    reasoning = []
    counted = []

    for memory in recalled.vendor_memory:
        if memory.confidence < IGNORE_BELOW:
            continue

        strength = _strength(memory.confidence)
        reasoning.append(f'({strength}) Vendor pattern detected: "{memory.pattern}" → {memory.meaning}')

        if strength == "strong":
            normalized_invoice[memory.pattern] = memory.meaning

        counted.append(memory.confidence)

    for memory in recalled.correction_memory:
        if memory.confidence < IGNORE_BELOW:
            continue

        strength = _strength(memory.confidence)
        proposed_corrections.append(memory.action)
        reasoning.append(f'({strength}) Suggested correction for issue "{memory.issue_type}": {memory.action}')

        counted.append(memory.confidence)

    # Context only
    for memory in recalled.resolution_memory:
        if memory.confidence < IGNORE_BELOW:
            continue

        strength = _strength(memory.confidence)
        reasoning.append(f'({strength}) Historical resolution for issue "{memory.issue_type}": {memory.resolution}')

        counted.append(memory.confidence)

    confidence_score = average(counted)

    return ApplyResult(
        normalized_invoice=normalized_invoice,
        proposed_corrections=proposed_corrections,
        reasoning=reasoning,
        confidence_score=confidence_score,
    )
