"""
HTTP surface for the invoice memory pipeline.
"""

import threading
from collections import OrderedDict

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import JSONResponse
from typing import List

from .schemas import (
    Invoice,
    HumanFeedback,
    AgentOutput,
    AuditTrailItem,
    VendorMemoryResponse,
    HealthResponse,
    ErrorResponse,
)
from ..core.audit import get_audit_trail
from ..core.config import VERSION, INVOICE_REGISTRY_SIZE, debug_enabled
from ..core.dao import get_vendor_memory
from ..core.db import MemoryStore
from ..core.errors import InvoiceNotFoundError, MemoryStoreError
from ..engine.pipeline import process_invoice, build_agent_output, run_feedback
from ..util.logging import logger

# Initialize the FastAPI application
app = FastAPI(
    title="Invoice Memory API",
    version=VERSION,
    description="Feedback-driven invoice decisions over a learned SQLite memory",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)

_store: MemoryStore = None

# Invoices seen by /invoices/process, kept for later feedback
_invoices: "OrderedDict[str, Invoice]" = OrderedDict()
_invoices_lock = threading.Lock()


def get_store() -> MemoryStore:
    """Lazily opened process-wide store."""
    global _store
    if _store is None:
        _store = MemoryStore()
    return _store


def remember_invoice(invoice: Invoice, max_size: int = None):
    """Keep an invoice for feedback, evicting the least recently processed."""
    limit = INVOICE_REGISTRY_SIZE if max_size is None else max_size
    with _invoices_lock:
        _invoices[invoice.invoice_id] = invoice
        _invoices.move_to_end(invoice.invoice_id)
        while len(_invoices) > limit:
            evicted_id, _ = _invoices.popitem(last=False)
            logger.debug(f"Evicted invoice {evicted_id} from registry")


def get_invoice(invoice_id: str) -> Invoice:
    with _invoices_lock:
        invoice = _invoices.get(invoice_id)
    if invoice is None:
        raise InvoiceNotFoundError(invoice_id)
    return invoice


@app.exception_handler(InvoiceNotFoundError)
async def invoice_not_found_handler(request: Request, exc: InvoiceNotFoundError):
    body = ErrorResponse(error_type="INVOICE_NOT_FOUND", message=str(exc),
                         details={"invoice_id": exc.invoice_id})
    return JSONResponse(status_code=404, content=body.model_dump(mode="json"))


@app.exception_handler(MemoryStoreError)
async def memory_store_error_handler(request: Request, exc: MemoryStoreError):
    logger.error(f"Memory store unavailable for {request.url.path}: {exc}")
    body = ErrorResponse(error_type="MEMORY_STORE_ERROR", message=str(exc))
    return JSONResponse(status_code=503, content=body.model_dump(mode="json"))


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(store: MemoryStore = Depends(get_store)):
    """Check system health."""
    db_health = store.health_check()

    return HealthResponse(
        status="healthy" if db_health else "unhealthy",
        version=VERSION,
        db_health=db_health
    )


@app.post("/invoices/process", response_model=AgentOutput)
def process_invoice_endpoint(invoice: Invoice, store: MemoryStore = Depends(get_store)):
    """Recall, apply and decide for an extracted invoice."""
    remember_invoice(invoice)
    decision = process_invoice(store, invoice)
    return build_agent_output(store, invoice, decision)


@app.post("/invoices/{invoice_id}/feedback", response_model=AgentOutput)
def feedback_endpoint(invoice_id: str, feedback: HumanFeedback, store: MemoryStore = Depends(get_store)):
    """Learn from reviewer feedback on a previously processed invoice."""
    invoice = get_invoice(invoice_id)
    return run_feedback(store, invoice, feedback)


@app.get("/invoices/{invoice_id}/audit", response_model=List[AuditTrailItem])
def audit_trail_endpoint(invoice_id: str, store: MemoryStore = Depends(get_store)):
    """Full audit trail for an invoice, oldest first."""
    return [
        AuditTrailItem(step=entry.step, timestamp=entry.timestamp, details=entry.details)
        for entry in get_audit_trail(store, invoice_id)
    ]


@app.get("/memory/vendors/{vendor}", response_model=List[VendorMemoryResponse])
def vendor_memory_endpoint(vendor: str, store: MemoryStore = Depends(get_store)):
    """Learned patterns for a vendor, strongest first."""
    records = get_vendor_memory(store, vendor)
    if not records:
        raise HTTPException(status_code=404, detail=f"No memory for vendor {vendor}")
    return [VendorMemoryResponse(**vars(record)) for record in records]
