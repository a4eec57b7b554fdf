import json
from unittest.mock import MagicMock

import pytest

from payments.store import get_transaction_store, reset_transaction_store

GATEWAY_BASE = 'https://gateway.test/api/v1'
WEBHOOK_SECRET = 'whsec_test_secret'
ADMIN_KEY = 'admin-test-key'


@pytest.fixture(autouse=True)
def hotspot_settings(settings):
    settings.HEXAI_API_BASE_URL = GATEWAY_BASE
    settings.HEXAI_API_KEY = 'hexai_test_key'
    settings.HEXAI_TIMEOUT = 5
    settings.WEBHOOK_SECRET = WEBHOOK_SECRET
    settings.WEBHOOK_ALLOW_UNSIGNED = False
    settings.ADMIN_API_KEY = ADMIN_KEY
    settings.CURRENCY = 'GMD'
    settings.CUSTOMER_PHONE_REGION = 'GM'
    settings.SUCCESS_URL = 'https://portal.test/payment/success'
    settings.ERROR_URL = 'https://portal.test/payment/error'
    settings.TRANSACTION_STORE = 'payments.store.InMemoryTransactionStore'
    settings.DEBUG = False
    return settings


@pytest.fixture(autouse=True)
def store(hotspot_settings):
    reset_transaction_store()
    yield get_transaction_store()
    reset_transaction_store()


def make_response(status_code=200, payload=None, text=None):
    """Stand-in for requests.Response as returned by the gateway."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if payload is None:
        response.json.side_effect = ValueError('No JSON object could be decoded')
        response.text = text or ''
    else:
        response.json.return_value = payload
        response.text = text or json.dumps(payload)
    return response


@pytest.fixture
def gateway_response():
    return make_response
