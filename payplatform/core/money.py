from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Iterable

from pydantic import PlainSerializer

ZERO = Decimal('0.00')

# Monetary amounts stay Decimal in Python and serialize as JSON numbers.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


def quantize_money(value: Decimal, places: int = 2) -> Decimal:
    """Round to currency precision using half-up rounding."""
    exponent = Decimal(1).scaleb(-places)
    return Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def round_whole(value: Decimal) -> Decimal:
    """Round to whole currency units."""
    return Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)
