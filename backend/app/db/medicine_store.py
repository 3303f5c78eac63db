"""In-memory medicine records. Owns every Medicine and its stock level."""
import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from app.core.exceptions import InsufficientStockError, NotFoundError, StockShortfall, ValidationError
from app.core.result import Result
from app.models.medicine import Medicine
from app.models.money import to_money

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "price", "stock_quantity", "description")


def _price(value) -> Decimal:
    try:
        return to_money(value)
    except ValueError as e:
        raise ValidationError.for_field("price", str(e))


class MedicineStore:
    """
    Medicine map keyed by id.

    Every operation runs under ``lock`` (re-entrant), and callers that need
    several operations to be atomic, like the invoice workflow, can hold it
    across them. Records leave the store as copies.
    """

    def __init__(self) -> None:
        self._medicines: Dict[str, Medicine] = OrderedDict()
        self.lock = threading.RLock()

    # ------------------------------------------------------------------ reads

    def get_all(self) -> List[Medicine]:
        """All medicines ordered by name (plain string order, case-sensitive)."""
        with self.lock:
            return sorted((replace(m) for m in self._medicines.values()), key=lambda m: m.name)

    def get_by_id(self, medicine_id: str) -> Optional[Medicine]:
        with self.lock:
            medicine = self._medicines.get(medicine_id)
            return replace(medicine) if medicine else None

    def check_availability(self, medicine_id: str, requested_quantity: int) -> bool:
        """True when the medicine exists and has at least ``requested_quantity`` in stock."""
        with self.lock:
            medicine = self._medicines.get(medicine_id)
            if medicine is None:
                return False
            return requested_quantity <= medicine.stock_quantity

    def __len__(self) -> int:
        return len(self._medicines)

    # -------------------------------------------------------------- mutations

    def create(
        self,
        name: str,
        price,
        stock_quantity: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Medicine:
        medicine = Medicine(
            id=str(uuid.uuid4()),
            name=name,
            price=_price(price),
            stock_quantity=0 if stock_quantity is None else int(stock_quantity),
            description=description or "",
        )
        self._check(medicine)
        with self.lock:
            self._medicines[medicine.id] = medicine
        logger.info(f"Medicine created: {medicine.name} ({medicine.id}) stock={medicine.stock_quantity}")
        return replace(medicine)

    def update(self, medicine_id: str, **changes) -> Optional[Medicine]:
        """Merge ``changes`` into the record. Returns None if it does not exist.

        Only name, price, stock_quantity and description can change; the id
        is fixed at creation.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError.for_field(sorted(unknown)[0], "Field cannot be updated")

        with self.lock:
            current = self._medicines.get(medicine_id)
            if current is None:
                return None
            merged = {k: v for k, v in changes.items() if v is not None}
            if "price" in merged:
                merged["price"] = _price(merged["price"])
            updated = replace(current, **merged)
            self._check(updated)
            self._medicines[medicine_id] = updated
            return replace(updated)

    def delete(self, medicine_id: str) -> bool:
        """Hard delete. Invoices that reference the medicine keep their snapshot."""
        with self.lock:
            removed = self._medicines.pop(medicine_id, None)
        if removed is not None:
            logger.info(f"Medicine deleted: {removed.name} ({medicine_id})")
        return removed is not None

    def adjust_stock(self, medicine_id: str, delta: int) -> Result[Medicine]:
        """Add ``delta`` (negative for a sale) to the stock level.

        A result below zero is refused and the record is left as it was.
        """
        with self.lock:
            medicine = self._medicines.get(medicine_id)
            if medicine is None:
                return Result.failure(NotFoundError("Medicine", medicine_id))
            new_quantity = medicine.stock_quantity + delta
            if new_quantity < 0:
                return Result.failure(
                    InsufficientStockError(
                        [StockShortfall(medicine.id, medicine.name, -delta, medicine.stock_quantity)]
                    )
                )
            medicine.stock_quantity = new_quantity
            return Result.success(replace(medicine))

    def apply_deductions(self, lines: Iterable[Tuple[str, int]]) -> Result[List[Medicine]]:
        """Deduct every (medicine_id, quantity) pair, or none of them.

        Quantities for the same medicine are summed. All new levels are
        computed and checked against zero before any is written.
        """
        wanted: Dict[str, int] = OrderedDict()
        for medicine_id, quantity in lines:
            wanted[medicine_id] = wanted.get(medicine_id, 0) + quantity

        with self.lock:
            shortfalls = []
            for medicine_id, quantity in wanted.items():
                medicine = self._medicines.get(medicine_id)
                available = medicine.stock_quantity if medicine else 0
                if quantity > available:
                    name = medicine.name if medicine else "Unknown"
                    shortfalls.append(StockShortfall(medicine_id, name, quantity, available))
            if shortfalls:
                return Result.failure(InsufficientStockError(shortfalls))

            for medicine_id, quantity in wanted.items():
                self._medicines[medicine_id].stock_quantity -= quantity
            return Result.success([replace(self._medicines[mid]) for mid in wanted])

    def restock(self, lines: Iterable[Tuple[str, int]]) -> None:
        """Put quantities back, skipping medicines deleted in the meantime."""
        with self.lock:
            for medicine_id, quantity in lines:
                medicine = self._medicines.get(medicine_id)
                if medicine is not None:
                    medicine.stock_quantity += quantity

    # ---------------------------------------------------------------- helpers

    @staticmethod
    def _check(medicine: Medicine) -> None:
        if not medicine.name or not medicine.name.strip():
            raise ValidationError.for_field("name", "Name cannot be empty")
        if medicine.price < Decimal("0"):
            raise ValidationError.for_field("price", "Price cannot be negative")
        if medicine.stock_quantity < 0:
            raise ValidationError.for_field("stockQuantity", "Stock quantity cannot be negative")
