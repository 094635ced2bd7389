#!/usr/bin/env python3
"""
Command-line demo of the invoice memory pipeline on the bundled sample data.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from invoice_memory.core.config import DB_PATH, validate_config
from invoice_memory.core.db import MemoryStore
from invoice_memory.core.errors import InvoiceMemoryError
from invoice_memory.demo import load_invoices, load_feedback, run_demo


def main():
    parser = argparse.ArgumentParser(
        description="Run the invoice memory learning demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Demo against ./data/invoice_memory.db
  %(prog)s --db-path :memory:       # Demo without persisting memory
  %(prog)s --second INV-B-001       # Second invoice from another vendor

Environment variables:
- DB_PATH=./data/invoice_memory.db
- RISKY_KEYWORDS=tax,vat,total,amount,payment
        """
    )

    parser.add_argument("--db-path", default=DB_PATH, help="SQLite memory database")
    parser.add_argument("--invoices", help="Extracted invoices JSON file")
    parser.add_argument("--corrections", help="Human corrections JSON file")
    parser.add_argument("--first", default="INV-A-001", help="Invoice to learn from")
    parser.add_argument("--second", default="INV-A-002", help="Invoice processed after learning")

    args = parser.parse_args()

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}")
        return 1

    try:
        store = MemoryStore(args.db_path)
        try:
            lines = run_demo(
                store,
                load_invoices(args.invoices),
                load_feedback(args.corrections),
                args.first,
                args.second,
            )
        finally:
            store.close()
    except InvoiceMemoryError as e:
        print(f"ERROR: Demo failed: {e}")
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
