"""
Sample-data demo: learning over time for one vendor.

1. First invoice, no prior memory -> human review
2. Learn from the reviewer's feedback
3. Second invoice from the same vendor -> memory is recalled
"""

import json
from pathlib import Path
from typing import List, Tuple

from .api.schemas import Invoice, HumanFeedback
from .core.db import MemoryStore
from .core.errors import InvoiceNotFoundError
from .engine.pipeline import process_invoice, run_feedback
from .engine.recall import recall_memory
from .engine.apply import apply_memory

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def load_json(path) -> list:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_invoices(path=None) -> List[Invoice]:
    return [Invoice.model_validate(item) for item in load_json(path or DATA_DIR / "invoices_extracted.json")]


def load_feedback(path=None) -> List[Tuple[str, HumanFeedback]]:
    """(invoice id, feedback) pairs from the human corrections file."""
    return [
        (item["invoiceId"], HumanFeedback.model_validate(item))
        for item in load_json(path or DATA_DIR / "human_corrections.json")
    ]


def find_invoice(invoices: List[Invoice], invoice_id: str) -> Invoice:
    for invoice in invoices:
        if invoice.invoice_id == invoice_id:
            return invoice
    raise InvoiceNotFoundError(invoice_id, f"Invoice {invoice_id} not found in sample data")


def find_feedback(feedback: List[Tuple[str, HumanFeedback]], invoice_id: str) -> HumanFeedback:
    for feedback_invoice_id, item in feedback:
        if feedback_invoice_id == invoice_id:
            return item
    raise InvoiceNotFoundError(invoice_id, f"Human correction for {invoice_id} not found")


def run_demo(store: MemoryStore, invoices: List[Invoice], feedback: List[Tuple[str, HumanFeedback]],
             first_id: str, second_id: str) -> List[str]:
    """Run the two-invoice scenario and return the lines to print."""
    lines = ["=== Invoice Memory Learning Demo ===", ""]

    first = find_invoice(invoices, first_id)
    lines.append(f"--- Processing Invoice {first.invoice_id} ---")
    recalled = recall_memory(store, first)
    lines.append(f"Memory found: {'none' if recalled.is_empty() else 'yes'}")

    decision = process_invoice(store, first)
    lines.append("Human review required" if decision.requires_human_review else "Auto-processed")
    lines.append(f"Confidence: {decision.confidence_score}")
    lines.append("")

    lines.append("Learning from human correction...")
    output = run_feedback(store, first, find_feedback(feedback, first.invoice_id))
    lines.extend(output.memory_updates)
    lines.append("")

    second = find_invoice(invoices, second_id)
    lines.append(f"--- Processing Invoice {second.invoice_id} ---")
    recalled = recall_memory(store, second)
    lines.append(f"Memory found for vendor {second.vendor}: {'yes' if recalled.vendor_memory else 'no'}")

    lines.append("Suggested normalizations / corrections:")
    for reason in apply_memory(second, recalled).reasoning:
        lines.append(f"- {reason}")

    decision = process_invoice(store, second)
    lines.append("Human review required" if decision.requires_human_review else "Auto-correct possible")
    lines.append(f"Confidence: {decision.confidence_score}")
    lines.append("")
    lines.append("=== Demo Complete ===")
    return lines
