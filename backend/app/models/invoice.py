from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Tuple


@dataclass(frozen=True)
class CartItem:
    """Line snapshot taken when the medicine was put in the cart.

    Later price or name changes on the medicine do not reach recorded invoices.
    """
    medicine_id: str
    medicine_name: str
    quantity: int
    rate: Decimal
    amount: Decimal


@dataclass(frozen=True)
class Invoice:
    id: str
    bill_number: str
    issue_date: str
    client_name: str
    client_address: str
    client_phone: str
    items: Tuple[CartItem, ...]
    subtotal: Decimal  # sum of item amounts, as submitted
    tax_percentage: Decimal
    tax_amount: Decimal
    total_due: Decimal  # subtotal + tax_amount, as submitted
    created_at: datetime
