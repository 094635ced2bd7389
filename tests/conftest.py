"""
Shared fixtures: a fresh memory store on a temporary database per test.
"""

import pytest

from invoice_memory.core.db import MemoryStore
from invoice_memory.api.schemas import Invoice, HumanFeedback


@pytest.fixture
def store(tmp_path):
    """Create a memory store backed by a temporary SQLite file."""
    memory_store = MemoryStore(str(tmp_path / "test_invoice_memory.db"))
    yield memory_store
    memory_store.close()


@pytest.fixture
def make_invoice():
    """Build invoices with sensible defaults."""
    def _make(invoice_id="INV-1", vendor="Acme", fields=None, **kwargs):
        return Invoice(
            invoice_id=invoice_id,
            vendor=vendor,
            fields=fields if fields is not None else {"invoiceDate": "2024-01-01"},
            confidence=kwargs.get("confidence", 0.9),
            raw_text=kwargs.get("raw_text", ""),
        )
    return _make


@pytest.fixture
def date_feedback():
    """Reviewer feedback correcting the invoice date field."""
    return HumanFeedback.model_validate({
        "corrections": [{
            "field": "invoiceDate",
            "from": "Rechnungsdatum",
            "to": "invoiceDate",
            "reason": "vendor date field",
        }],
        "finalDecision": "approved",
    })
