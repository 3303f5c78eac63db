from decimal import Decimal
from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel, Money


class MedicineCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Money = Field(ge=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)


class MedicineUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[Money] = Field(default=None, ge=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)


class MedicineResponse(CamelModel):
    id: str
    name: str
    description: str = ""
    price: Decimal
    stock_quantity: int


class StockAdjustment(CamelModel):
    delta: int  # negative for a sale, positive for a restock


class DeleteResponse(CamelModel):
    message: str
    id: str
