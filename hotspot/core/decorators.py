import hmac
import logging
from functools import wraps

from django.conf import settings

from payments.errors import ErrorCode

from .http import error_response

logger = logging.getLogger(__name__)

ADMIN_KEY_HEADER = 'X-Admin-Key'


def require_admin_key(view_func):
    """Operator-only views: the X-Admin-Key header must match ADMIN_API_KEY.

    When ADMIN_API_KEY is empty the view is disabled for everyone.
    """
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        expected = getattr(settings, 'ADMIN_API_KEY', '')
        supplied = request.headers.get(ADMIN_KEY_HEADER, '')
        if not expected or not hmac.compare_digest(expected.encode('utf-8'), supplied.encode('utf-8')):
            logger.warning('Refused %s %s: missing or wrong admin key', request.method, request.path)
            return error_response(ErrorCode.FORBIDDEN, 403)
        return view_func(request, *args, **kwargs)
    return _wrapped
