from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from app.schemas.base import CamelModel, Money


class CartItemIn(CamelModel):
    medicine_id: str = Field(min_length=1)
    medicine_name: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    rate: Money = Field(ge=0)
    amount: Money = Field(ge=0)


class InvoiceCreate(CamelModel):
    """Cart checkout payload. Totals are computed by the caller."""

    bill_number: Optional[str] = Field(default=None, min_length=1)
    issue_date: Optional[str] = Field(default=None, min_length=1)
    client_name: str = Field(min_length=1)
    client_address: str = Field(min_length=1)
    client_phone: str = Field(min_length=10)
    items: List[CartItemIn] = Field(min_length=1)
    subtotal: Money
    tax_percentage: Money = Field(ge=0)
    tax_amount: Money
    total_due: Money


class CartItemOut(CamelModel):
    medicine_id: str
    medicine_name: str
    quantity: int
    rate: Decimal
    amount: Decimal


class InvoiceResponse(CamelModel):
    id: str
    bill_number: str
    issue_date: str
    client_name: str
    client_address: str
    client_phone: str
    items: List[CartItemOut]
    subtotal: Decimal
    tax_percentage: Decimal
    tax_amount: Decimal
    total_due: Decimal
    created_at: datetime
