"""
Display formatting helpers.
Indian locale (en-IN): lakh/crore digit grouping, INR currency symbol.
These never feed back into totals computation.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import date, datetime
from typing import Union, Optional

CURRENCY_SYMBOLS = {
    'INR': '₹',
    'USD': '$',
}


def _group_indian(integer_part: str) -> str:
    """Group digits as 12,34,56,789 (last three, then pairs)."""
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ','.join(groups) + ',' + tail


def num_in(value: Union[int, float, Decimal, str, None], decimals: Optional[int] = 2) -> str:
    """
    Format a number with Indian digit grouping.

    Args:
        value: Number to format
        decimals: Fixed decimal places (None = keep significant decimals)

    Returns:
        Formatted string, or "-" for empty/invalid input

    Examples:
        num_in(1234567.891) -> "12,34,567.89"
        num_in(999) -> "999.00"
        num_in(1500.5, decimals=None) -> "1,500.5"
    """
    if value is None or value == "":
        return "-"

    try:
        num = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    if not num.is_finite():
        return "-"

    if decimals is not None:
        num = num.quantize(Decimal(10) ** -decimals, rounding=ROUND_HALF_UP)

    sign = "-" if num < 0 else ""
    num_str = f"{abs(num):f}"

    if '.' in num_str:
        integer_part, decimal_part = num_str.split('.')
        if decimals is None:
            decimal_part = decimal_part.rstrip('0')
    else:
        integer_part, decimal_part = num_str, ""

    formatted = _group_indian(integer_part)
    if decimal_part:
        return f"{sign}{formatted}.{decimal_part}"
    return f"{sign}{formatted}"


def money_in(value: Union[int, float, Decimal, str, None], currency: str = 'INR') -> str:
    """
    Format a monetary amount with currency symbol and exactly 2 decimals.

    Examples:
        money_in(212.4) -> "₹212.40"
        money_in(-30) -> "-₹30.00"
        money_in(125000) -> "₹1,25,000.00"
    """
    formatted = num_in(value, decimals=2)
    if formatted == "-":
        return formatted

    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    if formatted.startswith('-'):
        return f"-{symbol}{formatted[1:]}"
    return f"{symbol}{formatted}"


def date_in(value: Union[date, datetime, str, None]) -> str:
    """
    Short day-month label as used on analytics charts.

    Examples:
        date_in(date(2026, 10, 19)) -> "19 Oct"
        date_in("2026-10-05") -> "5 Oct"
    """
    if value is None or value == "":
        return "-"

    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return "-"

    if isinstance(value, datetime):
        value = value.date()

    if not isinstance(value, date):
        return "-"

    return f"{value.day} {value.strftime('%b')}"


def date_iso(value: Union[date, datetime, str, None]) -> Optional[str]:
    """ISO date (YYYY-MM-DD) for API payloads; None stays None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]
