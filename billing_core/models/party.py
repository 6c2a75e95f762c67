"""Customer or vendor reference carried on a document."""
from typing import Any, Dict, Mapping, Optional

from billing_core.models.address import parse_address, normalize_address

PARTY_FIELDS = ('id', 'name', 'email', 'phone', 'address')


class Party:
    """Party snapshot: saved record id (optional) plus contact details."""

    def __init__(self, name='', email='', phone='', address=None, id: Optional[str] = None):
        self.id = id or None
        self.name = (name or '').strip()
        self.email = (email or '').strip()
        self.phone = (phone or '').strip()
        self.address = parse_address(address)

    @classmethod
    def from_record(cls, record: Mapping[str, Any], prefix: str) -> 'Party':
        """Read `<prefix>Name`, `<prefix>Email`, ... keys from an API record."""
        values = {}
        for field in PARTY_FIELDS:
            values[field] = record.get(f"{prefix}{field.capitalize()}")
        return cls(**values)

    def replace(self, **changes) -> 'Party':
        values = {field: getattr(self, field) for field in PARTY_FIELDS}
        values.update(changes)
        return Party(**values)

    def to_payload(self, prefix: str) -> Dict[str, Any]:
        """Party keys for the API; blank optional values are left out."""
        data = {f"{prefix}Name": self.name}
        if self.id:
            data[f"{prefix}Id"] = self.id
        if self.email:
            data[f"{prefix}Email"] = self.email
        if self.phone:
            data[f"{prefix}Phone"] = self.phone
        address = normalize_address(self.address)
        if address:
            data[f"{prefix}Address"] = address
        return data

    def __eq__(self, other):
        return isinstance(other, Party) and all(
            getattr(other, f) == getattr(self, f) for f in PARTY_FIELDS
        )

    def __repr__(self):
        return f"<Party(id={self.id}, name={self.name!r})>"


