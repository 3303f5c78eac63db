"""
Invoice creation: turn a checked-out cart into a stored invoice.

Flow (one invoice at a time, under the medicine store lock):
1. VALIDATING  - bill number free, optional totals check, every line
                 re-checked against *current* stock. Any short line aborts
                 with InsufficientStock and nothing is touched.
2. DEDUCTING   - all lines deducted together (all-or-nothing).
3. PERSISTING  - invoice stored with the cart snapshot and submitted totals.
                 If this fails the deducted stock is put back.
4. DONE        - the stored invoice is returned.

Business failures come back as a failed Result, not as exceptions.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from app.core.audit import AuditLog
from app.core.exceptions import (
    ClinicError,
    InsufficientStockError,
    InternalError,
    StockShortfall,
    ValidationError,
)
from app.core.result import Result
from app.db.medicine_store import MedicineStore
from app.db.session import ClinicDatabase
from app.models.invoice import CartItem, Invoice
from app.models.money import to_money

logger = logging.getLogger(__name__)


class InvoiceStage(str, Enum):
    VALIDATING = "validating"
    DEDUCTING = "deducting"
    PERSISTING = "persisting"
    DONE = "done"


@dataclass(frozen=True)
class InvoiceDraft:
    """Everything the cart screen submits at checkout."""

    client_name: str
    client_address: str
    client_phone: str
    items: Tuple[CartItem, ...]
    subtotal: Decimal
    tax_percentage: Decimal
    tax_amount: Decimal
    total_due: Decimal
    bill_number: Optional[str] = None
    issue_date: Optional[str] = None

    @property
    def stock_lines(self) -> List[Tuple[str, int]]:
        return [(item.medicine_id, item.quantity) for item in self.items]


def calculate_totals(items: Tuple[CartItem, ...], tax_percentage) -> Dict[str, Decimal]:
    """Subtotal, tax and total for a cart, each rounded to the cent.

    Args:
        items: Cart lines; each line's amount is quantity x rate
        tax_percentage: Percent, e.g. 5 for 5%
    """
    subtotal = sum((to_money(item.quantity * item.rate) for item in items), Decimal("0.00"))
    rate = Decimal(str(tax_percentage))
    tax_amount = to_money(subtotal * rate / Decimal("100"))
    return {
        "subtotal": to_money(subtotal),
        "tax_amount": tax_amount,
        "total_due": to_money(subtotal + tax_amount),
    }


def verify_totals(draft: InvoiceDraft) -> Optional[ValidationError]:
    """Recompute the cart totals and report the first field that disagrees."""
    for index, item in enumerate(draft.items):
        if to_money(item.amount) != to_money(item.quantity * item.rate):
            return ValidationError.for_field(
                f"items.{index}.amount", f"Amount for {item.medicine_name} does not equal quantity x rate"
            )
    expected = calculate_totals(draft.items, draft.tax_percentage)
    submitted = {
        "subtotal": to_money(draft.subtotal),
        "tax_amount": to_money(draft.tax_amount),
        "total_due": to_money(draft.total_due),
    }
    for field, camel in (("subtotal", "subtotal"), ("tax_amount", "taxAmount"), ("total_due", "totalDue")):
        if submitted[field] != expected[field]:
            return ValidationError.for_field(
                camel, f"{camel} is {submitted[field]}, expected {expected[field]}"
            )
    return None


def find_shortfalls(medicines: MedicineStore, items: Tuple[CartItem, ...]) -> List[StockShortfall]:
    """Lines the shelf cannot cover right now.

    Lines for the same medicine are summed, so two lines of 6 against a stock
    of 10 fail together. One shortfall is reported per medicine.
    """
    demand: "OrderedDict[str, Tuple[CartItem, int]]" = OrderedDict()
    for item in items:
        first, total = demand.get(item.medicine_id, (item, 0))
        demand[item.medicine_id] = (first, total + item.quantity)

    shortfalls = []
    for medicine_id, (item, quantity) in demand.items():
        if medicines.check_availability(medicine_id, quantity):
            continue
        medicine = medicines.get_by_id(medicine_id)
        shortfalls.append(
            StockShortfall(
                medicine_id=medicine_id,
                medicine_name=medicine.name if medicine else item.medicine_name,
                requested_quantity=quantity,
                available_stock=medicine.stock_quantity if medicine else 0,
            )
        )
    return shortfalls


def create_invoice(db: ClinicDatabase, draft: InvoiceDraft, check_totals: bool = False) -> Result[Invoice]:
    """
    Run the checkout workflow for one cart.

    The medicine store lock is held from validation to persistence, so two
    checkouts for the same medicine cannot both pass validation and then
    overdraw the shelf.

    Returns:
        Result carrying the stored Invoice, or a ValidationError /
        InsufficientStockError / InternalError.
    """
    medicines = db.medicines
    with medicines.lock:
        stage = InvoiceStage.VALIDATING
        if draft.bill_number and db.invoices.has_bill_number(draft.bill_number):
            return Result.failure(
                ValidationError.for_field("billNumber", f"Bill number {draft.bill_number} already exists")
            )
        if check_totals:
            mismatch = verify_totals(draft)
            if mismatch is not None:
                return Result.failure(mismatch)

        shortfalls = find_shortfalls(medicines, draft.items)
        if shortfalls:
            AuditLog.log_stock_rejected(shortfalls, context="invoice")
            return Result.failure(InsufficientStockError(shortfalls))

        stage = InvoiceStage.DEDUCTING
        lines = draft.stock_lines
        deducted = medicines.apply_deductions(lines)
        if not deducted.ok:
            logger.error(f"[Invoice] Deduction refused after validation passed: {deducted.error.message}")
            return Result.failure(deducted.error)

        stage = InvoiceStage.PERSISTING
        try:
            invoice = db.invoices.create(
                client_name=draft.client_name,
                client_address=draft.client_address,
                client_phone=draft.client_phone,
                items=draft.items,
                subtotal=draft.subtotal,
                tax_percentage=draft.tax_percentage,
                tax_amount=draft.tax_amount,
                total_due=draft.total_due,
                bill_number=draft.bill_number,
                issue_date=draft.issue_date,
            )
        except ClinicError as e:
            medicines.restock(lines)
            logger.warning(f"[Invoice] Rejected while {stage.value}, stock restored: {e.message}")
            return Result.failure(e)
        except Exception as e:
            medicines.restock(lines)
            logger.error(f"[Invoice] Failed while {stage.value}, stock restored", exc_info=True)
            return Result.failure(InternalError(f"Invoice could not be stored: {type(e).__name__}"))

        stage = InvoiceStage.DONE

    for medicine in deducted.value:
        AuditLog.log_stock_adjustment(
            medicine.id,
            medicine.name,
            -sum(qty for mid, qty in lines if mid == medicine.id),
            medicine.stock_quantity,
            reason=f"invoice {invoice.bill_number}",
        )
    AuditLog.log_invoice_created(invoice)
    logger.info(f"[Invoice] {invoice.bill_number} {stage.value}: {len(invoice.items)} lines, total {invoice.total_due}")
    return Result.success(invoice)
