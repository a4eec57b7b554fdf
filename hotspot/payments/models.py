"""Transaction records kept for the lifetime of a hotspot payment.

These are plain records, not ORM models: they live in the configured
transaction store (see ``payments.store``) and never touch a database.
"""
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from django.utils import timezone

from .errors import InvalidTransition

SUCCESS_STATUSES = frozenset({'COMPLETED', 'SUCCESS', 'SUCCEEDED'})
FAILURE_STATUSES = frozenset({'FAILED', 'CANCELLED', 'CANCELED', 'EXPIRED', 'ERROR', 'REJECTED'})


class TransactionStatus(str, Enum):
    PENDING = 'PENDING'
    COMPLETED = 'COMPLETED'
    FAILED = 'FAILED'


ALLOWED_TRANSITIONS = {
    TransactionStatus.PENDING: {TransactionStatus.PENDING, TransactionStatus.COMPLETED, TransactionStatus.FAILED},
    TransactionStatus.COMPLETED: {TransactionStatus.COMPLETED},
    TransactionStatus.FAILED: {TransactionStatus.FAILED},
}


def transition(current, target):
    """Return ``target`` if a transaction may move there from ``current``.

    Terminal statuses only accept themselves, so a repeated webhook is a
    no-op while a failure reported after a completion is refused.
    """
    current = TransactionStatus(current)
    target = TransactionStatus(target)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current, target)
    return target


def is_success_status(status):
    return bool(status) and str(status).upper() in SUCCESS_STATUSES


def status_from_gateway(status):
    """Local status implied by a gateway status string, or None when still in flight."""
    if not status:
        return None
    value = str(status).upper()
    if value in SUCCESS_STATUSES:
        return TransactionStatus.COMPLETED
    if value in FAILURE_STATUSES:
        return TransactionStatus.FAILED
    return None


def now_iso():
    return timezone.now().isoformat()


@dataclass
class Transaction:
    reference: str
    amount: Decimal
    package_type: str
    voucher_code: str
    package_name: Optional[str] = None
    currency: Optional[str] = None
    device_info: Dict[str, Any] = field(default_factory=dict)
    customer_phone: Optional[str] = None
    transaction_id: Optional[str] = None
    status: TransactionStatus = TransactionStatus.PENDING
    gateway_status: Optional[str] = None
    gateway_transaction_id: Optional[str] = None
    failure_reason: Optional[str] = None
    created_at: str = field(default_factory=now_iso)
    completed_at: Optional[str] = None
    failed_at: Optional[str] = None
    verified_at: Optional[str] = None

    @property
    def is_paid(self):
        return self.status is TransactionStatus.COMPLETED

    def move_to(self, target):
        self.status = transition(self.status, target)
        return self.status

    def mark_completed(self, gateway_transaction_id=None, gateway_status=None):
        self.move_to(TransactionStatus.COMPLETED)
        self.completed_at = now_iso()
        if gateway_transaction_id:
            self.gateway_transaction_id = gateway_transaction_id
        if gateway_status:
            self.gateway_status = gateway_status

    def mark_failed(self, reason=None, gateway_status=None):
        self.move_to(TransactionStatus.FAILED)
        self.failed_at = now_iso()
        if reason:
            self.failure_reason = reason
        if gateway_status:
            self.gateway_status = gateway_status

    def package_info(self):
        """Package metadata released together with the voucher."""
        return {
            'package_type': self.package_type,
            'package_name': self.package_name,
            'amount': float(self.amount),
            'voucher_code': self.voucher_code,
        }

    def to_dict(self):
        data = asdict(self)
        data['amount'] = float(self.amount)
        data['status'] = self.status.value
        return data
