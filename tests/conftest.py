import json
from datetime import date
from unittest.mock import Mock

import pytest
import requests

from config import TestingConfig
from billing_core.auth import AuthContext
from billing_core.models import DocumentKind, Party, StructuredAddress
from billing_core.services.api_client import BackendClient
from billing_core.services.draft_service import new_draft


def _make_response(status_code=200, data=None, lines=None):
    """Build a real requests.Response with a JSON body or streamed lines."""
    response = requests.Response()
    response.status_code = status_code
    response.url = 'http://backend.test/'
    response._content_consumed = True
    if lines is not None:
        response._content = ''.join(f"{line}\n" for line in lines).encode('utf-8')
        response.encoding = 'utf-8'
    elif data is not None:
        response._content = json.dumps(data).encode('utf-8')
        response.encoding = 'utf-8'
    else:
        response._content = b''
    return response


@pytest.fixture
def config():
    return TestingConfig


@pytest.fixture
def auth():
    """Auth context for a signed-in test user."""
    return AuthContext('test-token', user={'_id': 'u1', 'email': 'owner@test.com'})


@pytest.fixture
def http():
    """Fake requests session; tests set get/post return values."""
    return Mock(spec=requests.Session)


@pytest.fixture
def client(auth, http, config):
    return BackendClient(
        auth,
        base_url=config.API_BASE_URL,
        timeout=config.API_TIMEOUT,
        stream_timeout=config.STREAM_CONNECT_TIMEOUT,
        http=http,
    )


@pytest.fixture
def customer():
    return Party(
        id='c1',
        name='Asha Traders',
        email='asha@example.com',
        phone='9800000000',
        address=StructuredAddress(street='12 MG Road', city='Pune', state='MH', pincode='411001', country='India'),
    )


@pytest.fixture
def invoice_draft(customer, config):
    """Invoice draft with company and customer filled in but no items."""
    draft = new_draft(DocumentKind.INVOICE, company_id='co1', config=config, today=date(2026, 10, 19))
    draft.set_party(customer)
    return draft


@pytest.fixture
def make_response():
    """Factory for fake backend responses."""
    return _make_response
