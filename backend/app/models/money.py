"""Exact-precision money helpers. Amounts are held as 2-place Decimals."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")

Numeric = Union[Decimal, int, float, str]


def to_money(value: Numeric) -> Decimal:
    """Canonicalise a number or numeric string to a 2-place Decimal.

    Floats go through ``str`` first so 25.5 becomes 25.50, not the binary
    expansion of 25.5.
    """
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Not a decimal amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Not a decimal amount: {value!r}")
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Amount out of range: {value!r}")
