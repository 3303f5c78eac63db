from typing import List

from pydantic import Field

from app.schemas.base import CamelModel


class StockCheckItem(CamelModel):
    medicine_id: str
    quantity: int = Field(ge=1)


class StockCheckRequest(CamelModel):
    items: List[StockCheckItem]


class StockCheckDetail(CamelModel):
    medicine_id: str
    medicine_name: str
    requested_quantity: int
    available_stock: int
    is_valid: bool


class StockCheckResponse(CamelModel):
    valid: bool
    details: List[StockCheckDetail]
