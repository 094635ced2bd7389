"""
HTTP API tests against a temporary memory store.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from invoice_memory.api import main
from invoice_memory.core.errors import MemoryStoreError

INVOICE = {
    "invoiceId": "INV-1",
    "vendor": "Acme",
    "fields": {"invoiceDate": "Rechnungsdatum"},
    "confidence": 0.9,
    "rawText": "Rechnungsdatum 01.01.2024",
}

FEEDBACK = {
    "corrections": [{"field": "invoiceDate", "from": "Rechnungsdatum", "to": "invoiceDate",
                     "reason": "vendor date field"}],
    "finalDecision": "approved",
}


@pytest.fixture
def client(store):
    """Test client with the store dependency pointed at a temporary database."""
    main.app.dependency_overrides[main.get_store] = lambda: store
    main._invoices.clear()
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()
    main._invoices.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["db_health"] is True


def test_process_then_feedback(client):
    response = client.post("/invoices/process", json=INVOICE)

    assert response.status_code == 200
    data = response.json()
    assert data["invoiceId"] == "INV-1"
    assert data["requiresHumanReview"] is True
    assert data["confidenceScore"] == 0
    assert data["auditTrail"] == []

    response = client.post("/invoices/INV-1/feedback", json=FEEDBACK)

    assert response.status_code == 200
    data = response.json()
    assert data["memoryUpdates"] == [
        "Learned vendor pattern for Acme: invoiceDate → invoiceDate",
        "Learned final resolution for vendor Acme: approved",
    ]
    assert [item["step"] for item in data["auditTrail"]] == ["learn", "learn"]

    response = client.post("/invoices/INV-1/feedback", json=FEEDBACK)
    assert response.json()["memoryUpdates"] == ["Invoice INV-1 already learned. Skipping duplicate learning."]


def test_process_returns_agent_output_shape(client):
    data = client.post("/invoices/process", json=INVOICE).json()

    assert set(data) == {
        "invoiceId", "normalizedInvoice", "proposedCorrections", "requiresHumanReview",
        "reasoning", "confidenceScore", "memoryUpdates", "auditTrail",
    }


def test_invoice_registry_is_bounded(client):
    with patch.object(main, "INVOICE_REGISTRY_SIZE", 2):
        for invoice_id in ("INV-1", "INV-2", "INV-3"):
            client.post("/invoices/process", json=dict(INVOICE, invoiceId=invoice_id))

    assert list(main._invoices) == ["INV-2", "INV-3"]
    assert client.post("/invoices/INV-1/feedback", json=FEEDBACK).status_code == 404
    assert client.post("/invoices/INV-3/feedback", json=FEEDBACK).status_code == 200


def test_feedback_for_unknown_invoice(client):
    response = client.post("/invoices/INV-404/feedback", json=FEEDBACK)

    assert response.status_code == 404
    data = response.json()
    assert data["error_type"] == "INVOICE_NOT_FOUND"
    assert data["details"]["invoice_id"] == "INV-404"


def test_invalid_feedback_rejected(client):
    client.post("/invoices/process", json=INVOICE)
    response = client.post("/invoices/INV-1/feedback", json={"corrections": [], "finalDecision": "maybe"})
    assert response.status_code == 422


def test_audit_and_vendor_memory(client):
    client.post("/invoices/process", json=INVOICE)
    client.post("/invoices/INV-1/feedback", json=FEEDBACK)

    audit = client.get("/invoices/INV-1/audit").json()
    assert audit[-1]["details"] == "Final decision recorded: approved"

    memory = client.get("/memory/vendors/Acme").json()
    assert [(m["pattern"], m["confidence"]) for m in memory] == [("invoiceDate", 0.5)]

    assert client.get("/memory/vendors/Globex").status_code == 404


def test_store_failure_maps_to_503(client):
    with patch('invoice_memory.engine.pipeline.recall_memory', side_effect=MemoryStoreError("database is locked")):
        response = client.post("/invoices/process", json=INVOICE)

    assert response.status_code == 503
    assert response.json()["error_type"] == "MEMORY_STORE_ERROR"
