import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from payments.errors import ErrorCode
from payments.store import get_transaction_store
from payments.utils import mask_phone

from .catalog import PACKAGES
from .decorators import require_admin_key
from .http import error_response

logger = logging.getLogger(__name__)

TRANSACTION_LIST_DEFAULT = 50
TRANSACTION_LIST_MAX = 200


@require_GET
def health(request):
    return JsonResponse({
        'status': 'ok',
        'service': 'HexAI WiFi Payment Backend',
        'timestamp': timezone.now().isoformat(),
        'env': 'development' if settings.DEBUG else 'production',
    })


@require_GET
def api_status(request):
    return JsonResponse({
        'status': 'active',
        'business': getattr(settings, 'BUSINESS_NAME', ''),
        'currency': getattr(settings, 'CURRENCY', 'GMD'),
        'gateway': 'HexAI Payment Gateway',
    })


@require_GET
def packages(request):
    return JsonResponse({
        'status': 'success',
        'data': {
            'currency': getattr(settings, 'CURRENCY', 'GMD'),
            'packages': PACKAGES,
        },
    })


@csrf_exempt
@require_POST
def log_redirect(request):
    """Record where the Wave app sent the customer back to, for debugging callback URLs."""
    try:
        data = json.loads(request.body.decode() or '{}')
    except (ValueError, UnicodeDecodeError):
        return error_response(ErrorCode.INVALID_REQUEST, 400, details='Invalid JSON payload')
    if not isinstance(data, dict):
        data = {}
    logger.info('Wave redirect: page=%s url=%s params=%s client_timestamp=%s',
                data.get('page'), data.get('url'), data.get('params'), data.get('timestamp'))
    return JsonResponse({'status': 'logged'})


@require_GET
@require_admin_key
def transactions(request):
    try:
        limit = int(request.GET.get('limit', TRANSACTION_LIST_DEFAULT))
    except ValueError:
        return error_response(ErrorCode.INVALID_REQUEST, 400, details='limit must be an integer')
    limit = max(1, min(limit, TRANSACTION_LIST_MAX))

    store = get_transaction_store()
    records = store.list(limit)
    items = []
    for record in records:
        item = record.to_dict()
        item['customer_phone'] = mask_phone(item.get('customer_phone'))
        items.append(item)
    return JsonResponse({'status': 'success', 'data': {'total': store.count(), 'transactions': items}})


def not_found(request, exception=None):
    logger.info('404 Not Found: %s %s', request.method, request.get_full_path())
    return error_response(
        ErrorCode.NOT_FOUND, 404,
        message=f'Route {request.method} {request.get_full_path()} not found on this server',
    )


def server_error(request):
    return error_response(ErrorCode.INTERNAL_ERROR, 500, message='An internal error occurred')
