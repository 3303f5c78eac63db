"""
Audit logging for stock and billing events.

Every change to a medicine, every stock movement and every invoice
produces one JSON line on the "audit" logger, so the day's sales can be
reconstructed from logs even though the store itself is not persisted.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from app.core.exceptions import StockShortfall
from app.models.invoice import Invoice

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for inventory and invoice events."""

    @staticmethod
    def log_medicine_change(
        action: str,  # "create", "update", "delete", "import"
        medicine_id: str,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Usage:
            AuditLog.log_medicine_change("update", med.id, changes={"price": "30.00"})
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"medicine.{action}",
            "resource_id": medicine_id,
        }
        if changes:
            log_entry["changes"] = changes
        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_stock_adjustment(
        medicine_id: str,
        medicine_name: str,
        delta: int,
        new_quantity: int,
        reason: str = "manual",  # "manual", "invoice", "rollback"
    ):
        log_entry = {
            "timestamp": _now(),
            "event_type": "stock.adjusted",
            "resource_id": medicine_id,
            "medicine_name": medicine_name,
            "delta": delta,
            "new_quantity": new_quantity,
            "reason": reason,
        }
        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_stock_rejected(shortfalls: Iterable[StockShortfall], context: str):
        """A sale or adjustment refused because the shelf is short."""
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "stock.rejected",
            "context": context,
            "lines": [s.to_dict() for s in shortfalls],
        }
        audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_invoice_created(invoice: Invoice):
        log_entry = {
            "timestamp": _now(),
            "event_type": "invoice.created",
            "resource_id": invoice.id,
            "bill_number": invoice.bill_number,
            "client_name": invoice.client_name,
            "lines": len(invoice.items),
            "total_due": str(invoice.total_due),
        }
        audit_logger.info(json.dumps(log_entry))
