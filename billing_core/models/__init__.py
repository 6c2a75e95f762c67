"""Models package - exports the draft engine value objects."""
from billing_core.models.address import (
    Address, FreeformAddress, StructuredAddress, parse_address, normalize_address
)
from billing_core.models.line_item import LineItem
from billing_core.models.document_totals import DocumentTotals, aggregate
from billing_core.models.document_kind import DocumentKind, PartyRole, KIND_RULES, rules_for
from billing_core.models.party import Party
from billing_core.models.document_draft import DocumentDraft, DraftStatus

__all__ = [
    'Address', 'FreeformAddress', 'StructuredAddress', 'parse_address', 'normalize_address',
    'LineItem', 'DocumentTotals', 'aggregate',
    'DocumentKind', 'PartyRole', 'KIND_RULES', 'rules_for',
    'Party', 'DocumentDraft', 'DraftStatus',
]
