"""
Invoice memory pipeline - recall, apply, decide and learn over a
confidence-scored SQLite memory store.
"""

__version__ = "1.0.0"
