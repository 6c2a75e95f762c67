"""
Integration tests for building, submitting and reloading drafts
against a faked backend.
"""
from datetime import date

import pytest
import requests

from billing_core.exceptions import (
    ApiError, DraftStateError, NotFoundError, SubmitFailed, ValidationFailed
)
from billing_core.models import DocumentKind, DraftStatus, StructuredAddress
from billing_core.services.draft_service import (
    DraftSession, hydrate_draft, load_draft, new_draft, submit_draft, totals_display
)


def fill_scenario_b(draft):
    draft.add_item({'item_name': 'Widget', 'quantity': 1, 'unit_price': 50})
    draft.add_item({'item_name': 'Gadget', 'quantity': 3, 'unit_price': 20,
                    'discount': 50, 'taxPercent': 10})


def test_successful_submit(client, http, invoice_draft, make_response):
    fill_scenario_b(invoice_draft)
    http.post.return_value = make_response(201, {'_id': 'inv-42', 'invoiceNumber': 'INV-0042'})

    result = submit_draft(client, invoice_draft)

    assert result['invoiceNumber'] == 'INV-0042'
    assert invoice_draft.status == DraftStatus.SAVED
    assert invoice_draft.document_id == 'inv-42'

    args, kwargs = http.post.call_args
    assert args[0] == 'http://backend.test/api/invoices'
    assert kwargs['headers']['Authorization'] == 'Bearer test-token'
    assert kwargs['timeout'] == 1
    body = kwargs['json']
    assert body['totalAmount'] == 83.0
    assert body['subtotal'] == 110.0
    assert [item['netAmount'] for item in body['items']] == [50.0, 33.0]


def test_server_message_surfaced_on_rejection(client, http, invoice_draft, make_response):
    fill_scenario_b(invoice_draft)
    http.post.return_value = make_response(400, {'message': 'Duplicate invoice number'})

    with pytest.raises(SubmitFailed) as exc:
        submit_draft(client, invoice_draft)

    assert exc.value.status_code == 400
    assert invoice_draft.status == DraftStatus.FAILED
    assert invoice_draft.error == 'Duplicate invoice number'
    assert len(invoice_draft.items) == 2
    assert invoice_draft.totals.total_amount == 83


def test_resubmit_after_failure(client, http, invoice_draft, make_response):
    fill_scenario_b(invoice_draft)
    http.post.side_effect = [
        make_response(400, {'message': 'Duplicate invoice number'}),
        make_response(201, {'_id': 'inv-43'}),
    ]

    with pytest.raises(SubmitFailed):
        submit_draft(client, invoice_draft)
    submit_draft(client, invoice_draft)

    assert invoice_draft.status == DraftStatus.SAVED
    assert http.post.call_count == 2


def test_generic_message_without_server_body(client, http, customer, make_response):
    draft = new_draft('delivery_challan', company_id='co1', today=date(2026, 10, 19))
    draft.set_party(customer)
    draft.set_metadata('deliveryAddress', {'street': 'Gate 2', 'city': 'Pune'})
    draft.add_item({'item_name': 'Crate', 'quantity': 4, 'unit_price': 12})
    http.post.return_value = make_response(500)

    with pytest.raises(SubmitFailed):
        submit_draft(client, draft)

    assert draft.error == 'Failed to create delivery challan (Status: 500)'
    body = http.post.call_args.kwargs['json']
    assert body['deliveryAddress'] == 'Gate 2, Pune'
    assert body['deliveryDate'] == '2026-10-20'


def test_network_error(client, http, invoice_draft):
    fill_scenario_b(invoice_draft)
    http.post.side_effect = requests.ConnectionError('connection refused')

    with pytest.raises(SubmitFailed):
        submit_draft(client, invoice_draft)

    assert invoice_draft.status == DraftStatus.FAILED
    assert invoice_draft.error == 'Network error. Please try again.'


def test_validation_failure_sends_nothing(client, http, invoice_draft):
    invoice_draft.add_item({'item_name': 'Only'})
    invoice_draft.remove_item(0)

    with pytest.raises(ValidationFailed):
        submit_draft(client, invoice_draft)

    assert invoice_draft.status == DraftStatus.EMPTY
    http.post.assert_not_called()


def test_response_for_discarded_draft_is_dropped(client, http, invoice_draft, make_response):
    fill_scenario_b(invoice_draft)
    session = DraftSession(invoice_draft)

    def navigate_away(*args, **kwargs):
        session.discard()
        return make_response(201, {'_id': 'inv-44'})

    http.post.side_effect = navigate_away

    assert submit_draft(client, invoice_draft, session) is None
    assert invoice_draft.status == DraftStatus.SUBMITTING
    assert invoice_draft.document_id is None


def test_submit_requires_active_draft(client, invoice_draft):
    session = DraftSession()

    with pytest.raises(DraftStateError):
        submit_draft(client, invoice_draft, session)


def test_payload_round_trip_keeps_net_amounts(invoice_draft):
    invoice_draft.add_item({'item_name': 'A', 'quantity': '2.5', 'unit_price': '19.99',
                            'discount': '12.5', 'taxPercent': 18})
    invoice_draft.add_item({'description': 'B', 'quantity': 3, 'unit_price': '0.333', 'taxPercent': 5})
    payload = invoice_draft.to_payload()

    rebuilt = hydrate_draft(DocumentKind.INVOICE, payload)

    assert [i.net_amount for i in rebuilt.items] == [i.net_amount for i in invoice_draft.items]
    assert rebuilt.totals == invoice_draft.totals
    assert rebuilt.party.name == 'Asha Traders'
    assert rebuilt.company_id == 'co1'
    assert rebuilt.metadata['dueDate'] == '2026-11-03'


def test_hydrate_structured_address_record():
    record = {
        '_id': 'q-1',
        'companyId': 'co1',
        'customerName': 'Ravi',
        'customerAddress': {'street': '1 Park St', 'city': 'Kolkata'},
        'validUntil': '2026-12-01',
        'items': [{'itemName': 'Tiles', 'quantity': 10, 'unitPrice': 40, 'discount': 5,
                   'taxPercent': 18, 'netAmount': 1.0}],
        'totalAmount': 1.0,
    }

    draft = hydrate_draft('quotation', record)

    assert draft.document_id == 'q-1'
    assert draft.party.address == StructuredAddress(street='1 Park St', city='Kolkata')
    assert draft.status == DraftStatus.EDITING
    assert 'totalAmount' not in draft.metadata
    assert float(draft.totals.total_amount) == pytest.approx(448.4)


def test_load_draft(client, http, make_response):
    http.get.return_value = make_response(200, {
        '_id': 'p-7', 'companyId': 'co1', 'vendorName': 'Steel Co', 'vendorAddress': 'MIDC',
        'customerName': 'ignored', 'items': [{'itemName': 'Rod', 'quantity': 2, 'unitPrice': 300}],
    })

    draft = load_draft(client, 'purchase', 'p-7')

    assert http.get.call_args.args[0] == 'http://backend.test/api/purchases/p-7'
    assert draft.party.name == 'Steel Co'
    assert 'customerName' not in draft.metadata
    assert draft.totals.total_amount == 600


def test_load_missing_draft(client, http, make_response):
    http.get.return_value = make_response(404, {'message': 'Not found'})

    with pytest.raises(NotFoundError):
        load_draft(client, 'invoice', 'nope')


def test_load_draft_server_error(client, http, make_response):
    http.get.return_value = make_response(500, {'message': 'Database unavailable'})

    with pytest.raises(ApiError) as exc:
        load_draft(client, 'invoice', 'inv-1')
    assert exc.value.message == 'Database unavailable'


def test_totals_display(invoice_draft, config):
    fill_scenario_b(invoice_draft)
    summary = totals_display(invoice_draft, config)

    assert summary['total_amount'] == '₹83.00'
    assert summary['total_discount'] == '₹30.00'
    assert summary['items'] == ['₹50.00', '₹33.00']


def test_default_dates_per_kind(config):
    today = date(2026, 10, 19)

    assert new_draft('invoice', config=config, today=today).metadata['dueDate'] == date(2026, 11, 3)
    assert new_draft('quotation', config=config, today=today).metadata['validUntil'] == date(2026, 11, 18)
    assert new_draft('delivery_challan', config=config, today=today).metadata['deliveryDate'] == date(2026, 10, 20)
    assert new_draft('purchase', today=today).metadata == {}


def test_default_dates_fall_back_to_base_config(monkeypatch):
    from config import Config

    monkeypatch.setattr(Config, 'QUOTE_VALID_DAYS', 7)

    class PartialConfig:
        INVOICE_DUE_DAYS = 10

    today = date(2026, 10, 19)
    assert new_draft('quotation', today=today).metadata['validUntil'] == date(2026, 10, 26)
    assert new_draft('quotation', config=PartialConfig, today=today).metadata['validUntil'] == date(2026, 10, 26)
    assert new_draft('invoice', config=PartialConfig, today=today).metadata['dueDate'] == date(2026, 10, 29)
