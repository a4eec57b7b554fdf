import logging
from urllib.parse import quote

import requests
from django.conf import settings

from core.catalog import get_package

from .errors import ErrorCode, GatewayError, InvalidTransition, PaymentNotCompleted, PaymentValidationError
from .models import Transaction, is_success_status, now_iso, status_from_gateway
from .store import get_transaction_store
from .utils import (
    append_query_param,
    format_amount,
    generate_reference,
    generate_voucher_code,
    is_https_url,
    is_valid_package_type,
    normalize_customer_phone,
    parse_amount,
)

logger = logging.getLogger(__name__)

MAX_REFERENCE_ATTEMPTS = 5


class HexaiClient:
    """Client for the HexAI payment gateway collections API.

    Methods implemented:
    - initiate(amount, currency, reference, success_url, error_url, ...)
    - check_status(reference)

    Each method issues exactly one HTTP request and raises GatewayError on
    any failure; nothing is retried here.
    """

    def __init__(self, base_url=None, api_key=None, timeout=None):
        self.base_url = (base_url or getattr(settings, 'HEXAI_API_BASE_URL', '')).rstrip('/')
        self.api_key = api_key if api_key is not None else getattr(settings, 'HEXAI_API_KEY', '')
        self.timeout = timeout or getattr(settings, 'HEXAI_TIMEOUT', 30)
        if not self.api_key:
            logger.warning('HEXAI_API_KEY is not configured')

    def headers(self):
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.api_key}',
            'x-hexai-key': self.api_key,
        }

    def _send(self, method, url, **kwargs):
        try:
            return method(url, headers=self.headers(), timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:
            logger.error('Gateway request to %s timed out: %s', url, exc)
            raise GatewayError(ErrorCode.TIMEOUT_ERROR, 500, details=str(exc)) from exc
        except requests.ConnectionError as exc:
            logger.error('Gateway connection to %s failed: %s', url, exc)
            raise GatewayError(ErrorCode.CONNECTION_ERROR, 500, details=str(exc)) from exc
        except requests.RequestException as exc:
            logger.error('Gateway request to %s failed: %s', url, exc)
            raise GatewayError(ErrorCode.NETWORK_ERROR, 500, details=str(exc)) from exc

    @staticmethod
    def _parse(response):
        try:
            data = response.json()
        except ValueError:
            logger.error('Gateway returned non-JSON response (status=%s): %s', response.status_code, response.text)
            return {'status': 'error', 'message': response.text}
        if not isinstance(data, dict):
            return {'status': 'error', 'message': str(data)}
        return data

    @staticmethod
    def _error_from(data, status_code, fallback_details):
        error = data.get('error') if isinstance(data.get('error'), dict) else {}
        raw_code = error.get('code') or data.get('code')
        code = ErrorCode.from_gateway(raw_code)
        if raw_code and code.value == str(raw_code).upper():
            message = code.message
        else:
            message = error.get('message') or data.get('message') or code.message
        details = error.get('details') or data.get('message') or error.get('message') or fallback_details
        return GatewayError(code, status_code, details=details, message=message)

    def initiate(self, amount, currency, reference, success_url, error_url, customer_name=None, customer_mobile=None):
        url = f'{self.base_url}/collections/initiate'
        payload = {
            'amount': format_amount(amount),
            'currency': currency,
            'client_reference': reference,
            'success_url': success_url,
            'error_url': error_url,
        }
        if customer_mobile:
            payload['customer_name'] = customer_name or getattr(settings, 'CUSTOMER_NAME', 'WiFi Customer')
            payload['customer_mobile'] = customer_mobile
        logger.debug('Gateway initiate payload: %s', payload)

        response = self._send(requests.post, url, json=payload)
        data = self._parse(response)
        logger.info('Gateway initiate %s -> %s', reference, response.status_code)

        if response.ok and data.get('status') == 'success':
            return data.get('data') or data
        logger.error('Payment initiation failed for %s: %s', reference, data)
        raise self._error_from(data, response.status_code if not response.ok else 400, 'Failed to initiate payment')

    def check_status(self, reference):
        url = f"{self.base_url}/collections/status/{quote(str(reference), safe='')}"
        response = self._send(requests.get, url)
        data = self._parse(response)
        logger.debug('Gateway status %s -> %s', reference, response.status_code)
        if not response.ok:
            raise self._error_from(data, response.status_code, 'Failed to check payment status')
        return data.get('data') or {}

    @staticmethod
    def is_success_status(status):
        return is_success_status(status)


def _new_reference(package_type, store):
    for _ in range(MAX_REFERENCE_ATTEMPTS):
        reference = generate_reference(package_type)
        if not store.exists(reference):
            return reference
        logger.warning('Generated reference %s already exists; generating another', reference)
    raise PaymentValidationError(ErrorCode.DUPLICATE_REFERENCE, 409)


def initiate_payment(params, client=None, store=None):
    """Start a collection for a hotspot package and remember it as PENDING.

    ``params`` is the decoded request body from the portal. Returns the data
    the portal needs to send the customer to Wave; the voucher itself stays
    server-side until the payment is verified.
    """
    if client is None:
        client = HexaiClient()
    if store is None:
        store = get_transaction_store()

    amount_raw = params.get('amount')
    package_type = params.get('package_type')
    if amount_raw in (None, '') or not package_type:
        raise PaymentValidationError(ErrorCode.INVALID_REQUEST, details='Amount and package_type are required',
                                     message='Amount and package_type are required')
    if not is_valid_package_type(package_type):
        raise PaymentValidationError(ErrorCode.INVALID_REQUEST, details='package_type must be 1-16 letters or digits')
    package_type = str(package_type)
    try:
        amount = parse_amount(amount_raw)
    except ValueError as exc:
        raise PaymentValidationError(ErrorCode.INVALID_AMOUNT, details=str(exc)) from exc

    package = get_package(package_type)
    package_name = params.get('package_name') or (package['name'] if package else None)
    device_info = params.get('device_info') if isinstance(params.get('device_info'), dict) else {}
    currency = getattr(settings, 'CURRENCY', 'GMD')

    reference = _new_reference(package_type, store)
    voucher_code = generate_voucher_code(package_type, device_info.get('mac'))

    success_url = params.get('success_url')
    error_url = params.get('error_url')
    success_url = success_url if is_https_url(success_url) else getattr(settings, 'SUCCESS_URL', '')
    error_url = error_url if is_https_url(error_url) else getattr(settings, 'ERROR_URL', '')

    customer_phone = normalize_customer_phone(params.get('customer_phone'))
    if params.get('customer_phone') and not customer_phone:
        logger.info('Ignoring customer phone %r for %s: not a valid local number', params.get('customer_phone'), reference)

    logger.info('Initiating payment reference=%s amount=%s%s package=%s device_mac=%s',
                reference, currency, format_amount(amount), package_name, device_info.get('mac') or 'N/A')

    data = client.initiate(
        amount=amount,
        currency=currency,
        reference=reference,
        success_url=append_query_param(success_url, 'reference', reference),
        error_url=append_query_param(error_url, 'reference', reference),
        customer_mobile=customer_phone,
    )

    store.put(reference, Transaction(
        reference=reference,
        amount=amount,
        package_type=package_type,
        package_name=package_name,
        voucher_code=voucher_code,
        currency=currency,
        device_info=device_info,
        customer_phone=customer_phone,
        transaction_id=data.get('transaction_id'),
    ))
    logger.info('Payment initiated reference=%s transaction_id=%s', reference, data.get('transaction_id'))

    return {
        'transaction_id': data.get('transaction_id'),
        'redirect_url': data.get('redirect_url'),
        'wave_launch_url': data.get('wave_launch_url'),
        'client_reference': reference,
        'status': data.get('status') or 'PENDING',
    }


def verify_payment(reference, client=None, store=None):
    """Ask the gateway whether ``reference`` is paid and release the voucher if so.

    Returns ``(gateway_data, record)``. Raises PaymentNotCompleted unless the
    gateway reports a success status; the cached record is refreshed either way.
    """
    if client is None:
        client = HexaiClient()
    if store is None:
        store = get_transaction_store()

    data = client.check_status(reference)
    payment_status = data.get('status')

    def refresh(record):
        record.verified_at = now_iso()
        if payment_status:
            record.gateway_status = payment_status
        target = status_from_gateway(payment_status)
        if target is None or target is record.status:
            return
        try:
            record.move_to(target)
        except InvalidTransition as exc:
            logger.warning('Status poll for %s ignored: %s', reference, exc)
            return
        if record.is_paid:
            record.completed_at = record.verified_at
        else:
            record.failed_at = record.verified_at

    record = store.update(reference, refresh)

    if not is_success_status(payment_status):
        logger.info('Payment %s not completed (gateway status=%s)', reference, payment_status)
        raise PaymentNotCompleted(payment_status)
    if record is None:
        logger.warning('Payment %s completed but no local record exists', reference)
    return data, record
