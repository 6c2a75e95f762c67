"""Number parsing and rounding helpers for form input and API payloads."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

CENT = Decimal('0.01')
ZERO = Decimal('0')

Number = Union[int, float, Decimal, str, None]


def coerce_decimal(value: Number) -> Decimal:
    """
    Convert raw form input to Decimal, falling back to zero.

    Rules:
    - int, float and Decimal values are converted exactly via str()
    - strings are stripped; blank or unparseable strings become 0
    - None, booleans, NaN and infinities become 0

    A numeric field therefore always holds a computable value.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return ZERO
        try:
            number = Decimal(text)
        except (InvalidOperation, ValueError):
            return ZERO

    if not number.is_finite():
        return ZERO
    return number


def round_money(value: Number) -> Decimal:
    """Round to two decimal places, half up. Display/serialization only."""
    return coerce_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_json_number(value: Number) -> float:
    """
    Render a Decimal input as a JSON-friendly float without rounding.

    Inputs with up to 15 significant digits survive a float round trip
    exactly; longer inputs come back to double precision (relative
    error around 1e-16).
    """
    return float(coerce_decimal(value))


def money_to_json(value: Number) -> float:
    """Round to cents and render as a JSON float."""
    return float(round_money(value))
