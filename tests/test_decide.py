"""
Decide tests - thresholds, exact boundaries and the risk-keyword veto.
"""

import pytest

from invoice_memory.core.schema import ApplyResult
from invoice_memory.engine.decide import (
    decide,
    find_risky_keywords,
    RISKY_KEYWORDS,
    AUTO_PROCESS_REASON,
    MODERATE_CONFIDENCE_REASON,
    LOW_CONFIDENCE_REASON,
)


def applied(score, corrections=None):
    return ApplyResult(
        normalized_invoice={"invoiceDate": "2024-01-01"},
        proposed_corrections=corrections or [],
        reasoning=[],
        confidence_score=score,
    )


class TestThresholds:
    """Test the confidence bands."""

    def test_exact_auto_boundary(self):
        result = decide(applied(0.75))
        assert result.requires_human_review is False
        assert result.reasoning == AUTO_PROCESS_REASON

    def test_just_below_auto_boundary(self):
        result = decide(applied(0.749999))
        assert result.requires_human_review is True
        assert result.reasoning == MODERATE_CONFIDENCE_REASON

    @pytest.mark.parametrize("score", [0.5, 0.6, 0.74])
    def test_moderate_band(self, score):
        result = decide(applied(score))
        assert result.requires_human_review is True
        assert result.reasoning == MODERATE_CONFIDENCE_REASON

    @pytest.mark.parametrize("score", [0.0, 0.3, 0.49])
    def test_low_band(self, score):
        result = decide(applied(score))
        assert result.requires_human_review is True
        assert result.reasoning == LOW_CONFIDENCE_REASON

    def test_passes_through_apply_output(self):
        result = decide(applied(0.9, ["Look up PO"]))
        assert result.normalized_invoice == {"invoiceDate": "2024-01-01"}
        assert result.proposed_corrections == ["Look up PO"]
        assert result.confidence_score == 0.9


class TestRiskVeto:
    """Risky corrections always go to a human."""

    def test_tax_correction_vetoes_high_confidence(self):
        result = decide(applied(0.9, ["Recalculate tax on line items"]))
        assert result.requires_human_review is True
        assert "tax" in result.reasoning

    def test_keyword_match_is_case_insensitive(self):
        result = decide(applied(1.0, ["Fix VAT rounding"]))
        assert result.requires_human_review is True

    def test_non_risky_correction_is_auto_processed(self):
        result = decide(applied(0.9, ["Look up PO by vendor"]))
        assert result.requires_human_review is False

    def test_moderate_band_unaffected_by_risk(self):
        result = decide(applied(0.6, ["Adjust payment terms"]))
        assert result.reasoning == MODERATE_CONFIDENCE_REASON

    def test_custom_keyword_list(self):
        result = decide(applied(0.9, ["Recalculate tax"]), risky_keywords=("discount",))
        assert result.requires_human_review is False

    def test_default_keywords(self):
        assert set(RISKY_KEYWORDS) == {"tax", "vat", "total", "amount", "payment"}

    def test_find_risky_keywords(self):
        found = find_risky_keywords(["Fix Total amount", "recheck TOTAL"])
        assert found == ["total", "amount"]
        assert find_risky_keywords([]) == []
