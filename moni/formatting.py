"""Amount formatting for prompts and presentation."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from moni.config import get_settings


def format_currency(
    amount: Union[Decimal, int, float],
    symbol: Optional[str] = None,
) -> str:
    """
    Format an amount with two decimals and thousands separators.

    Rounding happens here and only here: the engine keeps exact values.

    >>> format_currency(Decimal("-1234.5"), "$")
    '-$1,234.50'
    """
    if symbol is None:
        symbol = get_settings().app.currency_symbol
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
