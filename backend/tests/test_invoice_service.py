"""Tests for the checkout workflow (validate, deduct, persist)."""
import threading
from decimal import Decimal

import pytest

from app.core.exceptions import InsufficientStockError, InternalError, ValidationError
from app.models.invoice import CartItem
from app.services.invoice_service import InvoiceDraft, calculate_totals, create_invoice, verify_totals


def _line(medicine, quantity):
    return CartItem(medicine.id, medicine.name, quantity, medicine.price, medicine.price * quantity)


def _draft(*lines, tax="5", **overrides):
    totals = calculate_totals(lines, tax)
    fields = dict(
        client_name="Asha Verma",
        client_address="12 Ring Road, Delhi",
        client_phone="9876543210",
        items=tuple(lines),
        subtotal=totals["subtotal"],
        tax_percentage=Decimal(tax),
        tax_amount=totals["tax_amount"],
        total_due=totals["total_due"],
    )
    fields.update(overrides)
    return InvoiceDraft(**fields)


@pytest.fixture
def paracetamol(store):
    return store.medicines.create(name="Paracetamol", price="25.50", stock_quantity=10)


@pytest.fixture
def cetirizine(store):
    return store.medicines.create(name="Cetirizine 10mg", price="15.00", stock_quantity=3)


class TestHappyPath:

    def test_deducts_and_stores(self, store, paracetamol):
        result = create_invoice(store, _draft(_line(paracetamol, 4)))

        assert result.ok
        invoice = result.value
        assert store.medicines.get_by_id(paracetamol.id).stock_quantity == 6
        assert invoice.items[0].amount == Decimal("102.00")
        assert invoice.subtotal == Decimal("102.00")
        assert invoice.tax_amount == Decimal("5.10")
        assert invoice.total_due == Decimal("107.10")
        assert store.invoices.get_by_id(invoice.id) == invoice

    def test_items_equal_submitted_cart(self, store, paracetamol, cetirizine):
        lines = (_line(paracetamol, 2), _line(cetirizine, 3))
        invoice = create_invoice(store, _draft(*lines)).unwrap()
        assert invoice.items == lines
        assert store.medicines.get_by_id(cetirizine.id).stock_quantity == 0

    def test_later_price_change_does_not_touch_invoice(self, store, paracetamol):
        invoice = create_invoice(store, _draft(_line(paracetamol, 1))).unwrap()
        store.medicines.update(paracetamol.id, price="99.99", name="Paracetamol 650")
        stored = store.invoices.get_by_id(invoice.id)
        assert stored.items[0].rate == Decimal("25.50")
        assert stored.items[0].medicine_name == "Paracetamol"

    def test_total_stored_as_submitted_without_verification(self, store, paracetamol):
        draft = _draft(_line(paracetamol, 1), total_due=Decimal("1.00"))
        invoice = create_invoice(store, draft).unwrap()
        assert invoice.total_due == Decimal("1.00")


class TestInsufficientStock:

    def test_second_request_rejected_and_stock_kept(self, store, paracetamol):
        create_invoice(store, _draft(_line(paracetamol, 4))).unwrap()

        result = create_invoice(store, _draft(_line(paracetamol, 10)))

        assert isinstance(result.error, InsufficientStockError)
        detail = result.error.details[0]
        assert detail["availableStock"] == 6
        assert detail["requestedQuantity"] == 10
        assert store.medicines.get_by_id(paracetamol.id).stock_quantity == 6
        assert len(store.invoices) == 1

    def test_one_bad_line_deducts_nothing_and_names_only_bad_lines(self, store, paracetamol, cetirizine):
        ibuprofen = store.medicines.create(name="Ibuprofen", price="35.75", stock_quantity=1)
        draft = _draft(_line(paracetamol, 5), _line(cetirizine, 4), _line(ibuprofen, 2))

        result = create_invoice(store, draft)

        assert not result.ok
        assert [d["medicineId"] for d in result.error.details] == [cetirizine.id, ibuprofen.id]
        assert store.medicines.get_by_id(paracetamol.id).stock_quantity == 10
        assert store.medicines.get_by_id(cetirizine.id).stock_quantity == 3
        assert store.medicines.get_by_id(ibuprofen.id).stock_quantity == 1
        assert len(store.invoices) == 0

    def test_deleted_medicine_reported_with_cart_name(self, store, paracetamol):
        line = _line(paracetamol, 1)
        store.medicines.delete(paracetamol.id)

        result = create_invoice(store, _draft(line))

        detail = result.error.details[0]
        assert detail["medicineName"] == "Paracetamol"
        assert detail["availableStock"] == 0

    def test_repeated_medicine_lines_are_summed(self, store, paracetamol):
        result = create_invoice(store, _draft(_line(paracetamol, 6), _line(paracetamol, 6)))
        assert not result.ok
        assert result.error.details == [
            {"medicineId": paracetamol.id, "medicineName": "Paracetamol", "requestedQuantity": 12, "availableStock": 10}
        ]
        assert store.medicines.get_by_id(paracetamol.id).stock_quantity == 10


class TestValidation:

    def test_duplicate_bill_number_checked_before_deducting(self, store, paracetamol):
        create_invoice(store, _draft(_line(paracetamol, 1), bill_number="INV-42")).unwrap()
        result = create_invoice(store, _draft(_line(paracetamol, 1), bill_number="INV-42"))
        assert isinstance(result.error, ValidationError)
        assert store.medicines.get_by_id(paracetamol.id).stock_quantity == 9

    def test_totals_checked_when_enabled(self, store, paracetamol):
        draft = _draft(_line(paracetamol, 2), total_due=Decimal("10.00"))
        result = create_invoice(store, draft, check_totals=True)
        assert isinstance(result.error, ValidationError)
        assert result.error.details[0]["field"] == "totalDue"
        assert store.medicines.get_by_id(paracetamol.id).stock_quantity == 10

    def test_verify_totals_accepts_float_noise_from_the_client(self, paracetamol):
        line = CartItem(paracetamol.id, "Paracetamol", 4, Decimal("25.5"), Decimal("102"))
        draft = _draft(
            line,
            subtotal=Decimal("102"),
            tax_amount=Decimal("5.1000000000000005"),
            total_due=Decimal("107.1"),
        )
        assert verify_totals(draft) is None

    def test_verify_totals_flags_bad_line_amount(self, paracetamol):
        line = CartItem(paracetamol.id, "Paracetamol", 2, Decimal("25.50"), Decimal("60.00"))
        error = verify_totals(_draft(line))
        assert error.details[0]["field"] == "items.0.amount"


class TestPersistFailure:

    def test_stock_restored_when_store_fails(self, store, paracetamol, monkeypatch):
        def broken_create(**kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(store.invoices, "create", broken_create)

        result = create_invoice(store, _draft(_line(paracetamol, 4)))

        assert isinstance(result.error, InternalError)
        assert store.medicines.get_by_id(paracetamol.id).stock_quantity == 10


class TestConcurrency:

    def test_parallel_checkouts_cannot_overdraw(self, store):
        med = store.medicines.create(name="Azithromycin 500mg", price="120", stock_quantity=10)
        results = []
        barrier = threading.Barrier(8)

        def checkout():
            barrier.wait()
            results.append(create_invoice(store, _draft(_line(med, 3))))

        threads = [threading.Thread(target=checkout) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        succeeded = [r for r in results if r.ok]
        assert len(succeeded) == 3
        assert store.medicines.get_by_id(med.id).stock_quantity == 1
        assert len(store.invoices) == 3
