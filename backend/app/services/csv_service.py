"""CSV import/export for the inventory and bills screens."""
import csv
import io
import logging
from typing import Dict, Iterable, List

from app.core.exceptions import ValidationError
from app.models.invoice import Invoice
from app.models.medicine import Medicine
from app.models.money import to_money

logger = logging.getLogger(__name__)

MEDICINE_COLUMNS = ["name", "price", "stockQuantity", "description"]
INVOICE_COLUMNS = ["billNumber", "customerName", "date", "totalAmount"]

# Header spellings accepted on import, lower-cased
_HEADER_ALIASES = {
    "name": "name",
    "medicine": "name",
    "medicinename": "name",
    "price": "price",
    "rate": "price",
    "stockquantity": "stock_quantity",
    "stock_quantity": "stock_quantity",
    "quantity": "stock_quantity",
    "stock": "stock_quantity",
    "description": "description",
}


def export_medicines_csv(medicines: Iterable[Medicine]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(MEDICINE_COLUMNS)
    for m in medicines:
        writer.writerow([m.name, str(m.price), m.stock_quantity, m.description])
    return output.getvalue()


def export_invoices_csv(invoices: Iterable[Invoice]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(INVOICE_COLUMNS)
    for inv in invoices:
        writer.writerow([inv.bill_number, inv.client_name, inv.issue_date, str(inv.total_due)])
    return output.getvalue()


def parse_medicines_csv(text: str) -> List[Dict]:
    """
    Read medicine rows from CSV text.

    Requires a header row with at least name and price; stockQuantity and
    description are optional. Blank lines are skipped. Every bad row is
    reported (row numbers count the header as row 1) and nothing is returned
    unless the whole file is clean.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    try:
        header = next(reader)
    except StopIteration:
        raise ValidationError.for_field("file", "CSV file is empty")

    columns = [_HEADER_ALIASES.get(h.strip().lower().replace(" ", "")) for h in header]
    missing = [c for c in ("name", "price") if c not in columns]
    if missing:
        raise ValidationError(
            f"Missing required column(s): {', '.join(missing)}",
            details=[{"field": c, "message": "Required column"} for c in missing],
        )

    rows: List[Dict] = []
    problems = []
    for line_no, values in enumerate(reader, start=2):
        if not any(v.strip() for v in values):
            continue
        record = {
            col: value.strip() for col, value in zip(columns, values) if col is not None
        }
        row = {"name": record.get("name", ""), "description": record.get("description") or None}
        if not row["name"]:
            problems.append({"row": line_no, "field": "name", "message": "Name cannot be empty"})
        try:
            row["price"] = to_money(record.get("price", ""))
            if row["price"] < 0:
                problems.append({"row": line_no, "field": "price", "message": "Price cannot be negative"})
        except ValueError:
            problems.append({"row": line_no, "field": "price", "message": "Price must be a number"})
        quantity = record.get("stock_quantity", "")
        if quantity:
            try:
                row["stock_quantity"] = int(quantity)
            except ValueError:
                problems.append(
                    {"row": line_no, "field": "stockQuantity", "message": "Stock quantity must be a whole number"}
                )
                continue
            if row["stock_quantity"] < 0:
                problems.append(
                    {"row": line_no, "field": "stockQuantity", "message": "Stock quantity cannot be negative"}
                )
        rows.append(row)

    if problems:
        raise ValidationError(f"{len(problems)} problem(s) in CSV file; nothing was imported", details=problems)
    if not rows:
        raise ValidationError.for_field("file", "CSV file has no data rows")
    logger.info(f"Parsed {len(rows)} medicine rows from CSV")
    return rows
