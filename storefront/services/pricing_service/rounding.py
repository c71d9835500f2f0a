from decimal import Decimal, ROUND_HALF_UP
from typing import Any


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so 0.85 stays 0.85 and not 0.84999999...
    return Decimal(str(value))


def round_half_up(value: Any) -> int:
    """
    Round to the nearest integer, halves away from zero.
    2.5 -> 3, -2.5 -> -3 (the builtin round() would give 2 and -2).
    """
    return int(to_decimal(value).to_integral_value(rounding=ROUND_HALF_UP))
