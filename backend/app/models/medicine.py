from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Medicine:
    """
    Catalog item with a price and shelf stock.

    Invariant: stock_quantity is never negative. Only MedicineStore mutates
    stored instances; everything it hands out is a copy.
    """
    id: str
    name: str
    price: Decimal
    stock_quantity: int = 0
    description: str = ""
