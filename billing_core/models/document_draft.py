"""Document draft: the editable state behind every document-creation page."""
import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

from billing_core.exceptions import (
    DraftStateError, ItemNotFoundError, ValidationFailed
)
from billing_core.models.address import (
    FreeformAddress, StructuredAddress, is_address_present, normalize_address, parse_address
)
from billing_core.models.document_kind import DocumentKind, rules_for
from billing_core.models.document_totals import DocumentTotals, aggregate
from billing_core.models.line_item import LineItem
from billing_core.models.party import Party


class DraftStatus(str, enum.Enum):
    """Draft lifecycle."""
    EMPTY = 'empty'
    EDITING = 'editing'
    SUBMITTING = 'submitting'
    SAVED = 'saved'
    FAILED = 'failed'


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (FreeformAddress, StructuredAddress)):
        return not is_address_present(value)
    return False


def _metadata_to_json(value: Any) -> Any:
    if isinstance(value, (FreeformAddress, StructuredAddress)):
        return normalize_address(value)
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, str):
        return value.strip()
    return value


class DocumentDraft:
    """
    One document being authored.

    Owns an ordered list of LineItems plus company, party and
    kind-specific metadata. Totals are computed from the items on
    every read.

    Lifecycle:
        EMPTY -> EDITING -> SUBMITTING -> SAVED | FAILED
    A FAILED draft keeps all of its data; editing or submitting it
    again is allowed.
    """

    def __init__(
        self,
        kind: Union[DocumentKind, str],
        company_id: Optional[str] = None,
        party: Optional[Party] = None,
        items: Optional[List[LineItem]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
        document_id: Optional[str] = None
    ):
        self.kind = DocumentKind(kind)
        self.rules = rules_for(self.kind)
        self.company_id = company_id or None
        self.party = party or Party()
        self.document_id = document_id
        self._items: List[LineItem] = list(items or [])
        self._metadata: Dict[str, Any] = {}
        for key, value in (metadata or {}).items():
            self._metadata[key] = self._coerce_metadata(key, value)

        self.status = DraftStatus.EDITING if self._items else DraftStatus.EMPTY
        self.error: Optional[str] = None
        self.result: Optional[Dict[str, Any]] = None

    # -- reads ----------------------------------------------------------

    @property
    def items(self):
        return tuple(self._items)

    @property
    def metadata(self) -> Dict[str, Any]:
        return dict(self._metadata)

    @property
    def totals(self) -> DocumentTotals:
        return aggregate(self._items)

    def get_item(self, index: int) -> LineItem:
        self._check_index(index)
        return self._items[index]

    # -- state helpers --------------------------------------------------

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or index < 0 or index >= len(self._items):
            raise ItemNotFoundError(index, len(self._items))

    def _ensure_editable(self) -> None:
        if self.status == DraftStatus.SUBMITTING:
            raise DraftStateError('Draft is being submitted and cannot be edited')
        if self.status == DraftStatus.SAVED:
            raise DraftStateError('Draft has already been saved')

    def _settle(self) -> None:
        self.status = DraftStatus.EDITING if self._items else DraftStatus.EMPTY
        self.error = None

    def _coerce_metadata(self, key: str, value: Any) -> Any:
        if key in self.rules.address_fields:
            return parse_address(value)
        return value

    # -- line item edits ------------------------------------------------

    def add_item(self, template: Union[LineItem, Mapping[str, Any], None] = None) -> int:
        """Append a row and return its index."""
        self._ensure_editable()
        if isinstance(template, LineItem):
            item = template
        else:
            item = LineItem.create(**dict(template or {}))
        self._items.append(item)
        self._settle()
        return len(self._items) - 1

    def update_item(self, index: int, field: str, value: Any) -> LineItem:
        """Re-derive one row from a single field edit."""
        self._ensure_editable()
        self._check_index(index)
        item = self._items[index].update(field, value)
        self._items[index] = item
        self._settle()
        return item

    def remove_item(self, index: int) -> LineItem:
        self._ensure_editable()
        self._check_index(index)
        item = self._items.pop(index)
        self._settle()
        return item

    # -- document-level edits -------------------------------------------

    def set_company(self, company_id: Optional[str]) -> None:
        self._ensure_editable()
        self.company_id = company_id or None
        self._settle()

    def set_party(self, party: Optional[Party] = None, **changes) -> Party:
        """Replace the party, or change some of its fields."""
        self._ensure_editable()
        base = party if party is not None else self.party
        self.party = base.replace(**changes) if changes else base
        self._settle()
        return self.party

    def set_metadata(self, key: str, value: Any) -> None:
        self._ensure_editable()
        self._metadata[key] = self._coerce_metadata(key, value)
        self._settle()

    # -- validation and serialization ----------------------------------

    def validate(self) -> None:
        """Raise ValidationFailed for the first missing or invalid field."""
        prefix = self.rules.party_prefix

        # An emptied draft reports the missing items before anything else
        if not self._items:
            raise ValidationFailed('items', 'At least one item required')
        if not self.company_id:
            raise ValidationFailed('companyId', 'Please select a company')
        if not self.party.name:
            raise ValidationFailed(f"{prefix}Name", f"Please enter {prefix} name")
        if not is_address_present(self.party.address):
            raise ValidationFailed(f"{prefix}Address", f"Please enter {prefix} address")

        for key, message in self.rules.required:
            if _is_missing(self._metadata.get(key)):
                raise ValidationFailed(key, message)

        for position, item in enumerate(self._items):
            if not item.label:
                raise ValidationFailed(
                    f"items[{position}].description",
                    f"Item {position + 1} needs a name or description"
                )

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for the document endpoint."""
        payload: Dict[str, Any] = {}
        if self.company_id:
            payload['companyId'] = self.company_id
        payload.update(self.party.to_payload(self.rules.party_prefix))

        for key, value in self._metadata.items():
            value = _metadata_to_json(value)
            if value is None or value == '':
                continue
            payload[key] = value

        payload['items'] = [item.to_payload() for item in self._items]
        payload.update(self.totals.to_payload())
        return payload

    # -- submission -----------------------------------------------------

    def begin_submit(self) -> Dict[str, Any]:
        """
        Validate and move to SUBMITTING.

        Returns the payload as of this call. A ValidationFailed leaves the
        status untouched.
        """
        if self.status in (DraftStatus.SUBMITTING, DraftStatus.SAVED):
            raise DraftStateError(f"Cannot submit a draft that is {self.status.value}")

        self.validate()
        payload = self.to_payload()
        self.status = DraftStatus.SUBMITTING
        self.error = None
        return payload

    def mark_saved(self, result: Optional[Mapping[str, Any]] = None) -> None:
        if self.status != DraftStatus.SUBMITTING:
            raise DraftStateError(f"Cannot mark a {self.status.value} draft as saved")
        self.result = dict(result or {})
        self.document_id = self.result.get('_id') or self.result.get('id') or self.document_id
        self.status = DraftStatus.SAVED
        self.error = None

    def mark_failed(self, reason: str) -> None:
        if self.status != DraftStatus.SUBMITTING:
            raise DraftStateError(f"Cannot mark a {self.status.value} draft as failed")
        self.status = DraftStatus.FAILED
        self.error = reason

    def __repr__(self):
        return (
            f"<DocumentDraft(kind={self.kind.value}, status={self.status.value}, "
            f"items={len(self._items)})>"
        )
