import logging

from django.conf import settings

from .errors import InvalidTransition
from .store import get_transaction_store
from .utils import compute_signature, signatures_match

logger = logging.getLogger(__name__)

SIGNATURE_HEADERS = ('wave-signature', 'x-webhook-signature')
COMPLETED_EVENTS = frozenset({'transaction.completed', 'collection.completed'})
FAILED_EVENTS = frozenset({'transaction.failed', 'collection.failed'})

# Outcomes reported by handle_event, mostly for logging and tests.
COMPLETED = 'completed'
FAILED = 'failed'
IGNORED = 'ignored'
UNKNOWN_REFERENCE = 'unknown_reference'
REJECTED_TRANSITION = 'rejected_transition'


def get_signature(headers):
    for name in SIGNATURE_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return None


def verify_webhook(raw_body, headers, secret=None, allow_unsigned=None):
    """True when the delivery may be processed.

    With a secret configured the body must carry a matching HMAC-SHA256
    signature. Without one, deliveries are refused unless
    WEBHOOK_ALLOW_UNSIGNED is switched on.
    """
    if secret is None:
        secret = getattr(settings, 'WEBHOOK_SECRET', '')
    if allow_unsigned is None:
        allow_unsigned = getattr(settings, 'WEBHOOK_ALLOW_UNSIGNED', False)

    if not secret:
        if allow_unsigned:
            logger.warning('WEBHOOK_SECRET is not configured; accepting unsigned webhook')
            return True
        logger.error('Webhook refused: WEBHOOK_SECRET is not configured and unsigned webhooks are disabled')
        return False

    supplied = get_signature(headers)
    if not signatures_match(compute_signature(raw_body, secret), supplied):
        logger.error('Invalid webhook signature (present=%s)', bool(supplied))
        return False
    return True


def handle_event(payload, store=None):
    """Apply a verified gateway event to the cached transaction."""
    if store is None:
        store = get_transaction_store()

    event = payload.get('event')
    transaction = payload.get('transaction')
    if not isinstance(transaction, dict):
        transaction = {}
    reference = transaction.get('client_reference')

    logger.info('Webhook received: event=%s transaction_id=%s reference=%s status=%s',
                event, transaction.get('id'), reference, transaction.get('status'))

    if event in COMPLETED_EVENTS:
        def apply(record):
            record.mark_completed(gateway_transaction_id=transaction.get('id'), gateway_status=transaction.get('status'))
        outcome = COMPLETED
    elif event in FAILED_EVENTS:
        def apply(record):
            record.mark_failed(reason=transaction.get('failure_reason'), gateway_status=transaction.get('status'))
        outcome = FAILED
    else:
        logger.info('Unhandled webhook event: %s', event)
        return IGNORED

    if not reference:
        logger.warning('Webhook %s without client_reference', event)
        return UNKNOWN_REFERENCE

    try:
        record = store.update(reference, apply)
    except InvalidTransition as exc:
        logger.warning('Webhook %s for %s ignored: %s', event, reference, exc)
        return REJECTED_TRANSITION

    if record is None:
        logger.warning('Webhook %s for unknown reference %s', event, reference)
        return UNKNOWN_REFERENCE

    if outcome == COMPLETED:
        logger.info('Payment successful: reference=%s amount=%s package=%s',
                    reference, transaction.get('amount'), record.package_name)
    else:
        logger.info('Payment failed: reference=%s reason=%s', reference, transaction.get('failure_reason'))
    return outcome
