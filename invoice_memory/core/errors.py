"""
Error types raised by the memory store and the pipeline.

Policy rejections (duplicate natural keys, contradictory resolutions) are
not errors and never raise.
"""


class InvoiceMemoryError(Exception):
    """Base exception for the invoice memory pipeline."""
    pass


class InvoiceNotFoundError(InvoiceMemoryError):
    """A referenced invoice or its feedback could not be found."""

    def __init__(self, invoice_id: str, message: str = None):
        self.invoice_id = invoice_id
        super().__init__(message or f"Invoice {invoice_id} not found")


class MemoryStoreError(InvoiceMemoryError):
    """The durable store is unreachable or a read/write failed."""
    pass
