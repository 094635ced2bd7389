"""
Recall tests - vendor memory by vendor, correction and resolution memory
by issue type, vendor-scoped and global.
"""

from invoice_memory.core.dao import save_vendor_memory, save_correction_memory, save_resolution_memory
from invoice_memory.engine.recall import recall_memory


class TestRecall:
    """Test memory recall for an invoice."""

    def test_no_memory(self, store, make_invoice):
        recalled = recall_memory(store, make_invoice())

        assert recalled.vendor_memory == []
        assert recalled.correction_memory == []
        assert recalled.resolution_memory == []
        assert recalled.is_empty()

    def test_vendor_memory_by_vendor(self, store, make_invoice):
        save_vendor_memory(store, "Acme", "invoiceDate", "invoiceDate")
        save_vendor_memory(store, "Globex", "dueDate", "dueDate")

        recalled = recall_memory(store, make_invoice(vendor="Acme"))
        assert [m.vendor for m in recalled.vendor_memory] == ["Acme"]

    def test_issue_memory_needs_issue_types(self, store, make_invoice):
        save_correction_memory(store, "Acme", "missing_po", "Look up PO")
        save_resolution_memory(store, "Acme", "missing_po", "approved")

        recalled = recall_memory(store, make_invoice(fields={}))
        assert recalled.correction_memory == []
        assert recalled.resolution_memory == []

    def test_vendor_and_global_issue_memory(self, store, make_invoice):
        vendor_fix = save_correction_memory(store, "Acme", "missing_po", "Look up PO")
        global_fix = save_correction_memory(store, None, "missing_po", "Ask for PO")
        save_correction_memory(store, "Globex", "missing_po", "Ignore")
        vendor_res = save_resolution_memory(store, "Acme", "missing_po", "approved")
        global_res = save_resolution_memory(store, None, "missing_po", "rejected")

        invoice = make_invoice(fields={"issueTypes": ["missing_po"]})
        recalled = recall_memory(store, invoice)

        assert [m.id for m in recalled.correction_memory] == [vendor_fix.id, global_fix.id]
        assert [m.id for m in recalled.resolution_memory] == [vendor_res.id, global_res.id]

    def test_concatenates_across_issue_types(self, store, make_invoice):
        save_correction_memory(store, None, "missing_po", "Ask for PO")
        save_correction_memory(store, None, "vat_mismatch", "Recompute VAT")

        invoice = make_invoice(fields={"issueTypes": ["missing_po", "vat_mismatch", "missing_po"]})
        recalled = recall_memory(store, invoice)

        # no de-duplication across repeated issue types
        assert [m.issue_type for m in recalled.correction_memory] == ["missing_po", "vat_mismatch", "missing_po"]

    def test_malformed_issue_types_treated_as_empty(self, store, make_invoice):
        save_correction_memory(store, None, "missing_po", "Ask for PO")

        for value in ("missing_po", {"missing_po": True}, 3, None):
            recalled = recall_memory(store, make_invoice(fields={"issueTypes": value}))
            assert recalled.correction_memory == []

    def test_recall_does_not_write(self, store, make_invoice):
        save_vendor_memory(store, "Acme", "invoiceDate", "invoiceDate")
        recall_memory(store, make_invoice(fields={"issueTypes": ["missing_po"]}))

        assert store.count("vendor_memory") == 1
        assert store.count("audit_trail") == 0
        assert store.count("correction_memory") == 0
