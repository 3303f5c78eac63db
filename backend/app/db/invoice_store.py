"""In-memory invoice records. Append-only: no update, no delete."""
import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from app.core.exceptions import ValidationError
from app.models.invoice import CartItem, Invoice
from app.models.money import to_money

logger = logging.getLogger(__name__)


def default_issue_date(moment: datetime) -> str:
    """en-IN short date, e.g. 07/03/2025."""
    return moment.astimezone().strftime("%d/%m/%Y")


class InvoiceStore:

    def __init__(self) -> None:
        self._invoices: Dict[str, Invoice] = {}
        self._bill_numbers: Dict[str, str] = {}
        self._last_created_at: Optional[datetime] = None
        self._lock = threading.RLock()

    def has_bill_number(self, bill_number: str) -> bool:
        with self._lock:
            return bill_number in self._bill_numbers

    def create(
        self,
        client_name: str,
        client_address: str,
        client_phone: str,
        items: Iterable[CartItem],
        subtotal,
        tax_percentage,
        tax_amount,
        total_due,
        bill_number: Optional[str] = None,
        issue_date: Optional[str] = None,
    ) -> Invoice:
        """
        Store an invoice exactly as submitted.

        Items and totals are kept verbatim apart from canonicalising amounts
        to 2-place decimals; nothing is recomputed here. The id, created_at
        and (when not supplied) bill number and issue date are assigned.
        """
        items = tuple(
            CartItem(
                medicine_id=item.medicine_id,
                medicine_name=item.medicine_name,
                quantity=int(item.quantity),
                rate=to_money(item.rate),
                amount=to_money(item.amount),
            )
            for item in items
        )
        if not items:
            raise ValidationError.for_field("items", "At least one medicine must be selected")

        with self._lock:
            created_at = self._next_timestamp()
            if bill_number is None:
                bill_number = self._generate_bill_number(created_at)
            elif bill_number in self._bill_numbers:
                raise ValidationError.for_field("billNumber", f"Bill number {bill_number} already exists")

            invoice = Invoice(
                id=str(uuid.uuid4()),
                bill_number=bill_number,
                issue_date=issue_date or default_issue_date(created_at),
                client_name=client_name,
                client_address=client_address,
                client_phone=client_phone,
                items=items,
                subtotal=to_money(subtotal),
                tax_percentage=to_money(tax_percentage),
                tax_amount=to_money(tax_amount),
                total_due=to_money(total_due),
                created_at=created_at,
            )
            self._invoices[invoice.id] = invoice
            self._bill_numbers[bill_number] = invoice.id

        logger.info(f"Invoice stored: {invoice.bill_number} ({invoice.id}) total={invoice.total_due}")
        return invoice

    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        with self._lock:
            return self._invoices.get(invoice_id)

    def get_all(self) -> List[Invoice]:
        """Newest first."""
        with self._lock:
            return sorted(self._invoices.values(), key=lambda inv: inv.created_at, reverse=True)

    def __len__(self) -> int:
        return len(self._invoices)

    def _next_timestamp(self) -> datetime:
        # Strictly increasing, so newest-first ordering has no ties
        now = datetime.now(timezone.utc)
        if self._last_created_at is not None and now <= self._last_created_at:
            now = self._last_created_at + timedelta(microseconds=1)
        self._last_created_at = now
        return now

    def _generate_bill_number(self, created_at: datetime) -> str:
        millis = int(created_at.timestamp() * 1000)
        candidate = f"INV-{millis}"
        while candidate in self._bill_numbers:
            millis += 1
            candidate = f"INV-{millis}"
        return candidate
