"""
Decide - auto-process or escalate to a human.

Pure function of the apply result; records nothing.
"""

from ..core.config import AUTO_PROCESS_AT, REVIEW_AT, get_risky_keywords
from ..core.schema import ApplyResult, DecisionResult

# Corrections mentioning any of these always go to a human
RISKY_KEYWORDS = get_risky_keywords()

AUTO_PROCESS_REASON = (
    "High confidence memory with no risky corrections detected. "
    "Invoice can be auto-corrected safely."
)
MODERATE_CONFIDENCE_REASON = (
    "Moderate confidence detected. Suggested corrections require human validation."
)
LOW_CONFIDENCE_REASON = "Low confidence detected. Invoice requires full human review."
RISK_VETO_REASON = (
    "High confidence, but proposed corrections touch risky fields ({keywords}). "
    "Invoice requires full human review."
)


def find_risky_keywords(proposed_corrections, keywords=None) -> list:
    """Risky keywords found (case-insensitively) in any proposed correction."""
    keywords = RISKY_KEYWORDS if keywords is None else keywords
    found = []
    for correction in proposed_corrections:
        text = correction.lower()
        for keyword in keywords:
            if keyword in text and keyword not in found:
                found.append(keyword)
    return found


def decide(apply_result: ApplyResult, risky_keywords=None) -> DecisionResult:
    """
    Rules, in order:
    - score >= AUTO_PROCESS_AT and no risky correction: auto-process
    - REVIEW_AT <= score < AUTO_PROCESS_AT: human review, moderate confidence
    - otherwise (low score, or a high score vetoed by a risky correction):
      human review
    """
    score = apply_result.confidence_score
    risky = find_risky_keywords(apply_result.proposed_corrections, risky_keywords)

    if score >= AUTO_PROCESS_AT and not risky:
        requires_human_review = False
        reasoning = AUTO_PROCESS_REASON
    elif REVIEW_AT <= score < AUTO_PROCESS_AT:
        requires_human_review = True
        reasoning = MODERATE_CONFIDENCE_REASON
    elif score >= AUTO_PROCESS_AT:
        requires_human_review = True
        reasoning = RISK_VETO_REASON.format(keywords=", ".join(risky))
    else:
        requires_human_review = True
        reasoning = LOW_CONFIDENCE_REASON

    return DecisionResult(
        requires_human_review=requires_human_review,
        reasoning=reasoning,
        confidence_score=score,
        normalized_invoice=apply_result.normalized_invoice,
        proposed_corrections=apply_result.proposed_corrections,
    )
