"""Payload builders mirroring what the cart and invoice screens send."""
from decimal import Decimal


def cart_line(medicine, quantity: int) -> dict:
    """Cart line the way the invoice screen builds it, priced at the current rate."""
    return {
        "medicineId": medicine.id,
        "medicineName": medicine.name,
        "quantity": quantity,
        "rate": str(medicine.price),
        "amount": str(medicine.price * quantity),
    }


def invoice_payload(lines: list, tax_percentage: str = "5", **overrides) -> dict:
    subtotal = sum((Decimal(line["amount"]) for line in lines), Decimal("0"))
    tax_amount = (subtotal * Decimal(tax_percentage) / 100).quantize(Decimal("0.01"))
    payload = {
        "clientName": "Asha Verma",
        "clientAddress": "12 Ring Road, Delhi",
        "clientPhone": "9876543210",
        "items": lines,
        "subtotal": str(subtotal),
        "taxPercentage": tax_percentage,
        "taxAmount": str(tax_amount),
        "totalDue": str(subtotal + tax_amount),
    }
    payload.update(overrides)
    return payload
