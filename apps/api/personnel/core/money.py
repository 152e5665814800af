from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from personnel.core.config import settings

CENTS = Decimal("0.01")


def to_minor_units(amount: Union[Decimal, str, int, float]) -> int:
    """Convert a major-unit amount (e.g. 8000.50) into integer cents."""
    value = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
    return int(value * 100)


def to_major_units(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENTS)


def format_money(cents: int, symbol: Optional[str] = None) -> str:
    """Render cents as a currency string, e.g. 800000 -> "$8000.00"."""
    symbol = settings.currency_symbol if symbol is None else symbol
    value = to_major_units(cents)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):.2f}"
