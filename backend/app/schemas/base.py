from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.money import to_money

# Ten digits before the point, two after
MAX_MONEY = Decimal("9999999999.99")


def _money(value: Decimal) -> Decimal:
    amount = to_money(value)
    if abs(amount) > MAX_MONEY:
        raise ValueError(f"Amount must not exceed {MAX_MONEY}")
    return amount


# Incoming amount, rounded to the cent and bounded before any store sees it
Money = Annotated[Decimal, AfterValidator(_money)]


class CamelModel(BaseModel):
    """JSON uses camelCase keys; Python code uses snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )
