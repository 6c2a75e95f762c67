"""Address variants for parties and delivery locations."""
from typing import Any, Mapping, Optional, Union

STRUCTURED_FIELDS = ('street', 'city', 'state', 'pincode', 'country')


class FreeformAddress:
    """Address typed as a single block of text."""

    def __init__(self, text: Optional[str] = ''):
        self.text = (text or '').strip()

    def is_empty(self) -> bool:
        return not self.text

    def __eq__(self, other):
        return isinstance(other, FreeformAddress) and other.text == self.text

    def __hash__(self):
        return hash(('freeform', self.text))

    def __repr__(self):
        return f"<FreeformAddress({self.text!r})>"


class StructuredAddress:
    """Address picked from a saved customer/vendor record."""

    def __init__(self, street='', city='', state='', pincode='', country=''):
        self.street = (street or '').strip()
        self.city = (city or '').strip()
        self.state = (state or '').strip()
        self.pincode = str(pincode or '').strip()
        self.country = (country or '').strip()

    def parts(self):
        return [getattr(self, name) for name in STRUCTURED_FIELDS]

    def is_empty(self) -> bool:
        return not any(self.parts())

    def to_dict(self):
        return {name: getattr(self, name) for name in STRUCTURED_FIELDS}

    def __eq__(self, other):
        return isinstance(other, StructuredAddress) and other.parts() == self.parts()

    def __hash__(self):
        return hash(('structured',) + tuple(self.parts()))

    def __repr__(self):
        return f"<StructuredAddress({', '.join(p for p in self.parts() if p)!r})>"


Address = Union[FreeformAddress, StructuredAddress]


def parse_address(value: Any) -> Address:
    """
    Build an address variant from API or form input.

    Strings become FreeformAddress, mappings become StructuredAddress,
    None becomes an empty FreeformAddress. Variants pass through.
    """
    if isinstance(value, (FreeformAddress, StructuredAddress)):
        return value
    if value is None:
        return FreeformAddress('')
    if isinstance(value, Mapping):
        return StructuredAddress(**{k: value.get(k) for k in STRUCTURED_FIELDS})
    if isinstance(value, str):
        return FreeformAddress(value)
    raise TypeError(f"Unsupported address value: {type(value).__name__}")


def normalize_address(address: Optional[Address]) -> str:
    """Canonical display/serialization string for an address."""
    if address is None:
        return ''
    if isinstance(address, FreeformAddress):
        return address.text
    return ', '.join(part for part in address.parts() if part)


def is_address_present(address: Optional[Address]) -> bool:
    return address is not None and not address.is_empty()
