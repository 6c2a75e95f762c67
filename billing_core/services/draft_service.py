"""Draft Service - build, hydrate and submit document drafts."""
import logging
from datetime import date, timedelta
from typing import Any, Dict, Mapping, Optional, Union

from config import Config
from billing_core.exceptions import DraftStateError, SubmitFailed
from billing_core.models import DocumentDraft, DocumentKind, LineItem, Party, rules_for
from billing_core.models.document_kind import PartyRole
from billing_core.utils.formatters import money_in

logger = logging.getLogger(__name__)

# Record keys that are never copied into draft metadata on hydration
_RECORD_SKIP_KEYS = {
    '_id', 'id', '__v', 'companyId', 'items', 'subtotal', 'totalDiscount', 'taxAmount',
    'totalAmount', 'createdAt', 'updatedAt', 'userId', 'createdBy',
}


def _offset_days(config: Any, name: str) -> int:
    """Day offset from the given config, falling back to the base Config."""
    return int(getattr(config, name, getattr(Config, name)))


def new_draft(
    kind: Union[DocumentKind, str],
    company_id: Optional[str] = None,
    config: Any = None,
    today: Optional[date] = None
) -> DocumentDraft:
    """
    Create an empty draft with the kind's default dates filled in.
    Invoices start with status 'draft'.
    """
    kind = DocumentKind(kind)
    rules = rules_for(kind)
    today = today or date.today()

    metadata: Dict[str, Any] = {}
    for key, setting in rules.default_dates.items():
        metadata[key] = today + timedelta(days=_offset_days(config, setting))
    if kind == DocumentKind.INVOICE:
        metadata['status'] = 'draft'

    return DocumentDraft(kind, company_id=company_id, metadata=metadata)


def hydrate_draft(kind: Union[DocumentKind, str], record: Mapping[str, Any]) -> DocumentDraft:
    """
    Rebuild a draft from a fetched document record.

    Items are re-derived from their inputs; stored netAmount and totals
    are ignored so the draft never carries stale figures.
    """
    kind = DocumentKind(kind)
    rules = rules_for(kind)
    prefix = rules.party_prefix

    party = Party.from_record(record, prefix)
    items = [LineItem.from_payload(data) for data in record.get('items') or []]

    party_keys = {f"{prefix}{field}" for field in ('Id', 'Name', 'Email', 'Phone', 'Address')}
    other_prefix = (
        PartyRole.VENDOR if rules.party_role == PartyRole.CUSTOMER else PartyRole.CUSTOMER
    ).value
    metadata = {
        key: value for key, value in record.items()
        if key not in _RECORD_SKIP_KEYS and key not in party_keys
        and not key.startswith(other_prefix)
    }

    draft = DocumentDraft(
        kind,
        company_id=record.get('companyId'),
        party=party,
        items=items,
        metadata=metadata,
        document_id=record.get('_id') or record.get('id'),
    )
    logger.debug(f"[DRAFT] Hydrated {rules.label} {draft.document_id} with {len(items)} items")
    return draft


def load_draft(client, kind: Union[DocumentKind, str], document_id: str) -> DocumentDraft:
    """Fetch a stored document and hydrate it for editing."""
    return hydrate_draft(kind, client.fetch_document(kind, document_id))


class DraftSession:
    """
    Tracks which draft the current view is editing.

    A submission whose draft was discarded while the request was in
    flight must not touch that draft.
    """

    def __init__(self, draft: Optional[DocumentDraft] = None):
        self.active: Optional[DocumentDraft] = draft

    def open(self, draft: DocumentDraft) -> DocumentDraft:
        self.active = draft
        return draft

    def discard(self) -> None:
        if self.active is not None:
            logger.debug(f"[DRAFT] Discarding {self.active!r}")
        self.active = None

    def is_active(self, draft: DocumentDraft) -> bool:
        return self.active is draft


def submit_draft(
    client,
    draft: DocumentDraft,
    session: Optional[DraftSession] = None
) -> Optional[Dict[str, Any]]:
    """
    Validate, serialize and send a draft.

    Returns:
        Backend success payload, or None when the draft was discarded
        before the response arrived

    Raises:
        ValidationFailed: pre-submit check failed; draft status unchanged
        SubmitFailed: backend rejected or unreachable; draft is FAILED
            with the reason and keeps all of its data
        DraftStateError: draft is already submitting or saved
    """
    if session is not None and not session.is_active(draft):
        raise DraftStateError('Draft is no longer open')

    payload = draft.begin_submit()
    label = draft.rules.label
    logger.info(f"[DRAFT] Submitting {label} ({len(payload['items'])} items, total {payload['totalAmount']})")

    try:
        result = client.create_document(draft.kind, payload)
    except SubmitFailed as e:
        if session is not None and not session.is_active(draft):
            logger.info(f"[DRAFT] Ignoring failure for discarded {label}: {e.message}")
            return None
        draft.mark_failed(e.message)
        raise

    if session is not None and not session.is_active(draft):
        logger.info(f"[DRAFT] Ignoring response for discarded {label}")
        return None

    draft.mark_saved(result)
    logger.info(f"[DRAFT] {label} saved as {draft.document_id}")
    return result


def totals_display(draft: DocumentDraft, config: Any = None) -> Dict[str, str]:
    """Formatted totals for the summary panel, plus one net amount per row."""
    currency = getattr(config, 'CURRENCY_CODE', 'INR')
    rounded = draft.totals.rounded()
    summary = {key: money_in(value, currency) for key, value in rounded.items()}
    summary['items'] = [money_in(item.net_amount, currency) for item in draft.items]
    return summary
