"""
Recall - collect every stored memory relevant to an invoice.

Read-only: no confidence changes, no learning.
"""

from ..core.dao import get_vendor_memory, get_correction_memory, get_resolution_memory
from ..core.db import MemoryStore
from ..core.schema import RecalledMemory
from ..api.schemas import Invoice


def recall_memory(store: MemoryStore, invoice: Invoice) -> RecalledMemory:
    """
    Recall vendor patterns for the invoice's vendor, and for each issue type
    tagged on the invoice both the vendor-scoped and the global correction
    and resolution memory. Results are concatenated per issue type without
    de-duplication; weighting is left to the apply stage.
    """
    recalled = RecalledMemory(vendor_memory=get_vendor_memory(store, invoice.vendor))

    for issue_type in invoice.issue_types():
        recalled.correction_memory.extend(get_correction_memory(store, invoice.vendor, issue_type))
        recalled.correction_memory.extend(get_correction_memory(store, None, issue_type))

        recalled.resolution_memory.extend(get_resolution_memory(store, invoice.vendor, issue_type))
        recalled.resolution_memory.extend(get_resolution_memory(store, None, issue_type))

    return recalled
