import logging
import re

from django.conf import settings
from django.http import HttpResponse
from django.utils.cache import patch_vary_headers

from payments.errors import ErrorCode

from .http import error_response

logger = logging.getLogger(__name__)

LOCAL_ORIGIN_PATTERNS = [
    re.compile(r'^https?://localhost(:\d+)?$'),
    re.compile(r'^https?://127\.0\.0\.1(:\d+)?$'),
    re.compile(r'^https?://0\.0\.0\.0(:\d+)?$'),
    re.compile(r'^https?://192\.168\.\d+\.\d+(:\d+)?$'),
]
HOSTED_SUFFIX = '.ondigitalocean.app'
ALLOWED_METHODS = 'GET, POST, OPTIONS'
ALLOWED_HEADERS = 'Content-Type, Authorization'


def origin_allowed(origin):
    """Portal pages are served from the router's LAN address, localhost or the hosted frontend."""
    if origin.endswith(HOSTED_SUFFIX):
        return True
    if any(pattern.match(origin) for pattern in LOCAL_ORIGIN_PATTERNS):
        return True
    return any(origin.startswith(allowed) for allowed in getattr(settings, 'CORS_ORIGINS', []))


class CorsMiddleware:
    """Cross-origin access for the captive-portal pages.

    Requests without an Origin header (curl, the gateway's webhook calls,
    native apps) pass untouched. Known origins get CORS headers and their
    preflights are answered here; anything else is refused with a JSON 403.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        origin = request.headers.get('Origin')
        if not origin:
            return self.get_response(request)

        if not origin_allowed(origin):
            logger.info('CORS blocked origin: %s', origin)
            return error_response(ErrorCode.FORBIDDEN, 403, message='Not allowed by CORS')

        if request.method == 'OPTIONS' and 'Access-Control-Request-Method' in request.headers:
            response = HttpResponse(status=204)
        else:
            response = self.get_response(request)

        response['Access-Control-Allow-Origin'] = origin
        response['Access-Control-Allow-Credentials'] = 'true'
        response['Access-Control-Allow-Methods'] = ALLOWED_METHODS
        response['Access-Control-Allow-Headers'] = ALLOWED_HEADERS
        patch_vary_headers(response, ('Origin',))
        return response
