"""
Display Formatting

The ONLY place where money is rounded. Values formatted here are for
people to read and must never be parsed back into a calculation.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from labcash.config import get_settings
from labcash.models.statement import Period


Number = Union[Decimal, int, float]


def format_currency(
    amount: Number,
    currency_code: Optional[str] = None,
) -> str:
    """
    Format an amount in whole currency units, e.g. 'PKR 1,234'.

    Rounds half away from zero. Negative amounts keep the sign in
    front: '-PKR 50'.
    """
    code = currency_code or get_settings().app.currency_code
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    whole = value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)

    if whole == 0:
        whole = Decimal("0")  # no "-PKR 0"
    sign = "-" if whole < 0 else ""
    return f"{sign}{code} {abs(whole):,.0f}"


def format_signed(amount: Number, currency_code: Optional[str] = None) -> str:
    """Ledger style: '+PKR 250' for credits, '-PKR 300' for debits."""
    formatted = format_currency(amount, currency_code)
    # Judge the sign on the rounded text so 0.3 reads "PKR 0", not "+PKR 0"
    if formatted.startswith("-") or formatted == format_currency(0, currency_code):
        return formatted
    return f"+{formatted}"


def format_day(value: date) -> str:
    """History table heading, e.g. 'Thu, May 02, 2024'."""
    return value.strftime("%a, %b %d, %Y")


def format_ledger_day(value: Optional[date], period: Optional[Period] = None) -> str:
    """Personal sheet date column. Undated lines show the month instead."""
    if value is not None:
        return format_day(value)
    return period.label if period else ""
