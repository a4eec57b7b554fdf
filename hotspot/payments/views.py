import base64
import io
import json
import logging

import qrcode
from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from core.http import error_response

from . import services
from .errors import ErrorCode, PaymentError, PaymentNotCompleted
from .utils import append_query_param
from .webhooks import handle_event, verify_webhook

logger = logging.getLogger(__name__)

# Errors whose raw text stays server-side unless DEBUG is on.
TRANSPORT_CODES = frozenset({
    ErrorCode.CONNECTION_ERROR,
    ErrorCode.TIMEOUT_ERROR,
    ErrorCode.NETWORK_ERROR,
    ErrorCode.INTERNAL_ERROR,
})
LOGIN_URL_KEYS = ('linkLoginOnly', 'link_login_only', 'linkLoginUrl', 'login_url')


def _request_data(request):
    if request.content_type in ('application/x-www-form-urlencoded', 'multipart/form-data'):
        return request.POST.dict()
    try:
        data = json.loads(request.body.decode() or '{}')
    except (ValueError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


def payment_error_response(exc):
    details = exc.details
    if exc.code in TRANSPORT_CODES and not settings.DEBUG:
        details = None
    return error_response(exc.code, exc.status_code, message=exc.message, details=details)


def internal_error_response(exc):
    return error_response(
        ErrorCode.INTERNAL_ERROR, 500,
        details=str(exc) if settings.DEBUG else None,
    )


def voucher_qr(record):
    """Base64 PNG QR code logging the device straight into the hotspot.

    Falls back to encoding the bare voucher when the portal did not pass the
    router's login URL in ``device_info``.
    """
    login_url = next((record.device_info.get(k) for k in LOGIN_URL_KEYS if record.device_info.get(k)), None)
    target = record.voucher_code
    if login_url and str(login_url).startswith(('http://', 'https://')):
        target = append_query_param(append_query_param(login_url, 'username', record.voucher_code),
                                    'password', record.voucher_code)
    img = qrcode.make(target)
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return base64.b64encode(buf.getvalue()).decode()


@csrf_exempt
@require_POST
def initiate_payment(request):
    data = _request_data(request)
    if data is None:
        return error_response(ErrorCode.INVALID_REQUEST, 400, details='Invalid JSON payload')

    try:
        result = services.initiate_payment(data)
    except PaymentError as exc:
        logger.warning('Payment initiation refused: %s', exc)
        return payment_error_response(exc)
    except Exception as exc:
        logger.exception('Payment initiation failed unexpectedly')
        return internal_error_response(exc)

    return JsonResponse({'status': 'success', 'data': result})


@require_GET
def payment_status(request, reference):
    try:
        data, record = services.verify_payment(reference)
    except PaymentNotCompleted as exc:
        return error_response(exc.code, exc.status_code, payment_status=exc.payment_status)
    except PaymentError as exc:
        logger.warning('Status check for %s failed: %s', reference, exc)
        return payment_error_response(exc)
    except Exception as exc:
        logger.exception('Status check for %s failed unexpectedly', reference)
        return internal_error_response(exc)

    body = dict(data)
    body['package_info'] = record.package_info() if record else None
    if record and request.GET.get('qr', '').lower() in ('1', 'true', 'yes'):
        body['voucher_qr'] = voucher_qr(record)
    return JsonResponse({'status': 'success', 'data': body})


@csrf_exempt
@require_POST
def webhook(request):
    raw = request.body
    if not verify_webhook(raw, request.headers):
        return error_response(ErrorCode.INVALID_SIGNATURE, 401)

    try:
        payload = json.loads(raw.decode('utf-8') or '{}')
    except (ValueError, UnicodeDecodeError):
        logger.warning('Webhook with unreadable body: %r', raw[:200])
        return error_response(ErrorCode.INVALID_REQUEST, 400, details='Invalid JSON payload')
    if not isinstance(payload, dict):
        payload = {}

    try:
        handle_event(payload)
    except Exception:
        logger.exception('Webhook processing failed')
        return JsonResponse({'error': 'Webhook processing failed'}, status=500)

    # Acknowledge even unknown references so the gateway stops redelivering.
    return JsonResponse({'received': True})
