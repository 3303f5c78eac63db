"""Inventory screen operations on top of MedicineStore: search, bulk add, manual stock moves."""
import logging
from typing import Dict, List, Optional, Sequence

from app.core.audit import AuditLog
from app.core.exceptions import InsufficientStockError, ValidationError
from app.core.result import Result
from app.db.medicine_store import MedicineStore
from app.models.medicine import Medicine
from app.models.money import to_money

logger = logging.getLogger(__name__)


def search_medicines(medicines: MedicineStore, search: Optional[str] = None) -> List[Medicine]:
    """Name-ordered medicines, filtered by case-insensitive name substring."""
    items = medicines.get_all()
    if search and search.strip():
        needle = search.strip().lower()
        items = [m for m in items if needle in m.name.lower()]
    return items


def low_stock(medicines: MedicineStore, threshold: int) -> List[Medicine]:
    """Medicines with fewer than ``threshold`` units, emptiest first."""
    items = [m for m in medicines.get_all() if m.stock_quantity < threshold]
    return sorted(items, key=lambda m: (m.stock_quantity, m.name))


def add_medicines(medicines: MedicineStore, rows: Sequence[Dict]) -> List[Medicine]:
    """Create several medicines, or none if any row is invalid.

    Each row holds name, price and optionally stock_quantity and description.
    Problems are collected per row and raised together as one ValidationError.
    """
    problems = []
    for index, row in enumerate(rows):
        name = (row.get("name") or "").strip()
        if not name:
            problems.append({"row": index, "field": "name", "message": "Name cannot be empty"})
        try:
            if to_money(row.get("price")) < 0:
                problems.append({"row": index, "field": "price", "message": "Price cannot be negative"})
        except ValueError:
            problems.append({"row": index, "field": "price", "message": "Price must be a number"})
        quantity = row.get("stock_quantity")
        if quantity is not None and int(quantity) < 0:
            problems.append(
                {"row": index, "field": "stockQuantity", "message": "Stock quantity cannot be negative"}
            )
    if problems:
        raise ValidationError(f"{len(problems)} invalid row(s); nothing was added", details=problems)

    with medicines.lock:
        created = [
            medicines.create(
                name=row["name"].strip(),
                price=row["price"],
                stock_quantity=row.get("stock_quantity"),
                description=row.get("description"),
            )
            for row in rows
        ]
    for medicine in created:
        AuditLog.log_medicine_change("import", medicine.id, {"name": medicine.name})
    logger.info(f"Bulk added {len(created)} medicines")
    return created


def adjust_stock(medicines: MedicineStore, medicine_id: str, delta: int) -> Result[Medicine]:
    """Manual restock (positive delta) or write-off (negative delta)."""
    result = medicines.adjust_stock(medicine_id, delta)
    if result.ok:
        AuditLog.log_stock_adjustment(
            medicine_id, result.value.name, delta, result.value.stock_quantity, reason="manual"
        )
    elif isinstance(result.error, InsufficientStockError):
        AuditLog.log_stock_rejected(result.error.shortfalls, context="manual")
    return result
