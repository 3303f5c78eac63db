"""Unit tests for the read-only cart stock check."""
from app.services.stock_service import validate_stock


def test_all_lines_available(store):
    a = store.medicines.create(name="Paracetamol 500mg", price="25.50", stock_quantity=10)
    b = store.medicines.create(name="Cetirizine 10mg", price="15", stock_quantity=3)

    report = validate_stock(store.medicines, [(a.id, 10), (b.id, 1)])

    assert report.valid is True
    assert [(d.medicine_name, d.requested_quantity, d.available_stock, d.is_valid) for d in report.details] == [
        ("Paracetamol 500mg", 10, 10, True),
        ("Cetirizine 10mg", 1, 3, True),
    ]


def test_one_short_line_makes_report_invalid(store):
    a = store.medicines.create(name="Paracetamol 500mg", price="25.50", stock_quantity=10)
    b = store.medicines.create(name="Cetirizine 10mg", price="15", stock_quantity=3)

    report = validate_stock(store.medicines, [(a.id, 2), (b.id, 4)])

    assert report.valid is False
    assert [d.is_valid for d in report.details] == [True, False]
    assert report.details[1].available_stock == 3


def test_unknown_medicine(store):
    report = validate_stock(store.medicines, [("gone", 1)])
    assert report.valid is False
    line = report.details[0]
    assert line.medicine_name == "Unknown"
    assert line.available_stock == 0
    assert line.is_valid is False


def test_check_does_not_mutate_or_reserve(store):
    a = store.medicines.create(name="Paracetamol 500mg", price="25.50", stock_quantity=10)
    validate_stock(store.medicines, [(a.id, 10)])
    validate_stock(store.medicines, [(a.id, 10)])
    assert store.medicines.get_by_id(a.id).stock_quantity == 10


def test_lines_are_checked_independently(store):
    a = store.medicines.create(name="Paracetamol 500mg", price="25.50", stock_quantity=10)
    report = validate_stock(store.medicines, [(a.id, 6), (a.id, 6)])
    assert report.valid is True


def test_empty_cart_is_valid(store):
    report = validate_stock(store.medicines, [])
    assert report.valid is True
    assert report.details == []
