"""
Structured logging for store writes, audit entries and pipeline steps.
"""

import logging
from typing import Any, Dict


def sanitize_details(details: Dict[str, Any], max_length: int = 100) -> Dict[str, Any]:
    """Truncate long string values before they reach the log."""
    sanitized = {}
    for k, v in details.items():
        if isinstance(v, str) and len(v) > max_length:
            sanitized[k] = v[:max_length - 3] + "..."
        else:
            sanitized[k] = v
    return sanitized


class StructuredLogger:
    """Structured logger for memory store and pipeline operations."""

    def __init__(self, name: str = "invoice_memory"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {sanitize_details(details)}"

        self.logger.info(message)

    def log_memory_operation(self, kind: str, operation: str, record_id: int = None,
                             details: Dict[str, Any] = None, status: str = "success"):
        """Log a write against one of the memory tables."""
        log_details = {}
        if record_id is not None:
            log_details["record_id"] = record_id
        if details:
            log_details.update(details)

        self.log_operation(f"{kind}.{operation}", status, log_details)

    def log_pipeline_step(self, invoice_id: str, step: str, details: Dict[str, Any] = None):
        """Log one recall/apply/decide/learn stage for an invoice."""
        log_details = {"invoice_id": invoice_id}
        if details:
            log_details.update(details)

        self.log_operation(f"pipeline.{step}", "completed", log_details)

    def log_audit_entry(self, invoice_id: str, step: str):
        """Log an appended audit trail row."""
        self.log_operation("audit.appended", "success", {"invoice_id": invoice_id, "step": step})

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
