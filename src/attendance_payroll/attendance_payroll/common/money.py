from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Quantize to two decimal places (half-up), accepting str/int/Decimal."""
    if isinstance(value, Decimal):
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Optional[Decimal]]) -> Decimal:
    total = ZERO
    for v in values:
        if v is not None:
            total += v
    return to_money(total)
