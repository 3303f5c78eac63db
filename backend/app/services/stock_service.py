"""Read-only stock check for a cart. Used before checkout to flag short lines.

Nothing is reserved: stock can change between this check and the invoice
being created, which is why the invoice workflow checks again.
"""
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from app.db.medicine_store import MedicineStore


@dataclass(frozen=True)
class StockCheckLine:
    medicine_id: str
    medicine_name: str
    requested_quantity: int
    available_stock: int
    is_valid: bool


@dataclass(frozen=True)
class StockCheckReport:
    valid: bool
    details: List[StockCheckLine]


def validate_stock(medicines: MedicineStore, items: Iterable[Tuple[str, int]]) -> StockCheckReport:
    """Check each (medicine_id, quantity) entry on its own against current stock.

    A missing medicine reads as "Unknown" with nothing available.
    """
    details = []
    for medicine_id, quantity in items:
        medicine = medicines.get_by_id(medicine_id)
        if medicine is None:
            details.append(StockCheckLine(medicine_id, "Unknown", quantity, 0, False))
            continue
        details.append(
            StockCheckLine(
                medicine_id=medicine_id,
                medicine_name=medicine.name,
                requested_quantity=quantity,
                available_stock=medicine.stock_quantity,
                is_valid=medicine.stock_quantity >= quantity,
            )
        )
    return StockCheckReport(valid=all(line.is_valid for line in details), details=details)
