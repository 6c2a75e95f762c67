"""Line item value object for document drafts."""
from decimal import Decimal
from typing import Any, Dict, Optional

from billing_core.exceptions import InvalidFieldValue
from billing_core.utils.number_format import (
    coerce_decimal, to_json_number, money_to_json, ZERO
)

HUNDRED = Decimal('100')

NUMERIC_FIELDS = ('quantity', 'unit_price', 'discount_percent', 'tax_percent')
TEXT_FIELDS = ('item_name', 'description', 'item_id')
PERCENT_FIELDS = ('discount_percent', 'tax_percent')

# API (camelCase) names accepted wherever a field name is expected
FIELD_ALIASES = {
    'itemName': 'item_name',
    'itemId': 'item_id',
    'unitPrice': 'unit_price',
    'discount': 'discount_percent',
    'discountPercent': 'discount_percent',
    'taxPercent': 'tax_percent',
}


def resolve_field(field: str) -> str:
    """Map an API or Python field name to the LineItem attribute name."""
    name = FIELD_ALIASES.get(field, field)
    if name not in NUMERIC_FIELDS and name not in TEXT_FIELDS:
        raise InvalidFieldValue(field, None, f"Unknown line item field: {field}")
    return name


def _clamp_percent(value: Decimal) -> Decimal:
    return min(max(value, ZERO), HUNDRED)


class LineItem:
    """
    Immutable snapshot of one billable row.

    Amounts are derived on every read from quantity, unit price,
    discount percent and tax percent; nothing derived is stored.
    Edits go through update(), which returns a new LineItem.
    """

    def __init__(
        self,
        item_name: str = '',
        description: str = '',
        quantity: Any = 1,
        unit_price: Any = 0,
        discount_percent: Any = 0,
        tax_percent: Any = 0,
        item_id: Optional[str] = None
    ):
        quantity = coerce_decimal(quantity)
        unit_price = coerce_decimal(unit_price)
        if quantity < 0:
            raise InvalidFieldValue('quantity', quantity, 'Quantity cannot be negative')
        if unit_price < 0:
            raise InvalidFieldValue('unit_price', unit_price, 'Unit price cannot be negative')

        self._item_name = (item_name or '').strip()
        self._description = (description or '').strip()
        self._item_id = item_id or None
        self._quantity = quantity
        self._unit_price = unit_price
        self._discount_percent = _clamp_percent(coerce_decimal(discount_percent))
        self._tax_percent = _clamp_percent(coerce_decimal(tax_percent))

    @classmethod
    def create(cls, **defaults) -> 'LineItem':
        """New row with quantity 1 and zero price, discount and tax."""
        values = {}
        for field, value in defaults.items():
            values[resolve_field(field)] = value
        return cls(**values)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'LineItem':
        """Rebuild a row from an API item dict; any sent netAmount is ignored."""
        values = {}
        for key, value in data.items():
            name = FIELD_ALIASES.get(key, key)
            if name in NUMERIC_FIELDS or name in TEXT_FIELDS:
                values[name] = value
        return cls(**values)

    # -- inputs ---------------------------------------------------------

    @property
    def item_name(self) -> str:
        return self._item_name

    @property
    def description(self) -> str:
        return self._description

    @property
    def item_id(self) -> Optional[str]:
        return self._item_id

    @property
    def quantity(self) -> Decimal:
        return self._quantity

    @property
    def unit_price(self) -> Decimal:
        return self._unit_price

    @property
    def discount_percent(self) -> Decimal:
        return self._discount_percent

    @property
    def tax_percent(self) -> Decimal:
        return self._tax_percent

    # -- derived --------------------------------------------------------

    @property
    def line_gross(self) -> Decimal:
        return self._quantity * self._unit_price

    @property
    def discount_amount(self) -> Decimal:
        return self.line_gross * self._discount_percent / HUNDRED

    @property
    def taxable_amount(self) -> Decimal:
        return self.line_gross - self.discount_amount

    @property
    def tax_amount(self) -> Decimal:
        return self.taxable_amount * self._tax_percent / HUNDRED

    @property
    def net_amount(self) -> Decimal:
        return self.taxable_amount + self.tax_amount

    @property
    def label(self) -> str:
        return self._item_name or self._description

    # -- edits ----------------------------------------------------------

    def _values(self) -> Dict[str, Any]:
        return {
            'item_name': self._item_name,
            'description': self._description,
            'item_id': self._item_id,
            'quantity': self._quantity,
            'unit_price': self._unit_price,
            'discount_percent': self._discount_percent,
            'tax_percent': self._tax_percent,
        }

    def update(self, field: str, value: Any) -> 'LineItem':
        """
        Apply one field change and return the new snapshot.

        Numeric input that cannot be parsed becomes 0. Negative quantity
        or price and percentages outside 0-100 raise InvalidFieldValue.
        """
        name = resolve_field(field)
        values = self._values()

        if name in TEXT_FIELDS:
            values[name] = '' if value is None else str(value)
            return LineItem(**values)

        number = coerce_decimal(value)
        if name in PERCENT_FIELDS:
            if number < 0 or number > HUNDRED:
                raise InvalidFieldValue(name, value, 'Percentage must be between 0 and 100')
        elif number < 0:
            raise InvalidFieldValue(name, value, f"{name.replace('_', ' ').capitalize()} cannot be negative")

        values[name] = number
        return LineItem(**values)

    # -- serialization --------------------------------------------------

    def to_payload(self) -> Dict[str, Any]:
        """API item dict. Inputs are sent unrounded, netAmount in cents."""
        data = {
            'itemName': self._item_name,
            'description': self._description,
            'quantity': to_json_number(self._quantity),
            'unitPrice': to_json_number(self._unit_price),
            'discount': to_json_number(self._discount_percent),
            'taxPercent': to_json_number(self._tax_percent),
            'netAmount': money_to_json(self.net_amount),
        }
        if self._item_id:
            data['itemId'] = self._item_id
        return data

    def __eq__(self, other):
        return isinstance(other, LineItem) and other._values() == self._values()

    def __hash__(self):
        return hash(tuple(self._values().items()))

    def __repr__(self):
        return (
            f"<LineItem(label={self.label!r}, qty={self._quantity}, "
            f"price={self._unit_price}, net={self.net_amount})>"
        )
