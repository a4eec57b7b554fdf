from decimal import Decimal

import pytest

from payments.errors import InvalidTransition
from payments.models import (
    Transaction,
    TransactionStatus,
    is_success_status,
    status_from_gateway,
    transition,
)


def make_transaction(**overrides):
    fields = dict(
        reference='WIFI-24H-1700000000000-ABCDEF12',
        amount=Decimal('25.00'),
        package_type='24h',
        package_name='24 Hours',
        voucher_code='24H-DEVICE-LP2Q3R4SABCDEF',
    )
    fields.update(overrides)
    return Transaction(**fields)


class TestTransitions:
    @pytest.mark.parametrize('target', list(TransactionStatus))
    def test_pending_can_move_anywhere(self, target):
        assert transition(TransactionStatus.PENDING, target) is target

    @pytest.mark.parametrize('terminal', [TransactionStatus.COMPLETED, TransactionStatus.FAILED])
    def test_terminal_status_accepts_itself(self, terminal):
        assert transition(terminal, terminal) is terminal

    @pytest.mark.parametrize('current,target', [
        (TransactionStatus.COMPLETED, TransactionStatus.FAILED),
        (TransactionStatus.COMPLETED, TransactionStatus.PENDING),
        (TransactionStatus.FAILED, TransactionStatus.COMPLETED),
        (TransactionStatus.FAILED, TransactionStatus.PENDING),
    ])
    def test_terminal_status_is_final(self, current, target):
        with pytest.raises(InvalidTransition):
            transition(current, target)

    def test_accepts_plain_strings(self):
        assert transition('PENDING', 'COMPLETED') is TransactionStatus.COMPLETED


class TestGatewayStatuses:
    @pytest.mark.parametrize('status', ['COMPLETED', 'SUCCESS', 'SUCCEEDED', 'completed'])
    def test_success_synonyms(self, status):
        assert is_success_status(status)
        assert status_from_gateway(status) is TransactionStatus.COMPLETED

    @pytest.mark.parametrize('status', ['PENDING', 'PROCESSING', None, ''])
    def test_in_flight(self, status):
        assert not is_success_status(status)
        assert status_from_gateway(status) is None

    @pytest.mark.parametrize('status', ['FAILED', 'CANCELLED', 'EXPIRED'])
    def test_failures(self, status):
        assert status_from_gateway(status) is TransactionStatus.FAILED


class TestTransaction:
    def test_new_transaction_is_pending(self):
        txn = make_transaction()
        assert txn.status is TransactionStatus.PENDING
        assert txn.created_at
        assert not txn.is_paid

    def test_mark_completed_records_gateway_details(self):
        txn = make_transaction()
        txn.mark_completed(gateway_transaction_id='txn_1', gateway_status='SUCCEEDED')
        assert txn.is_paid
        assert txn.completed_at
        assert txn.gateway_transaction_id == 'txn_1'
        assert txn.gateway_status == 'SUCCEEDED'

    def test_completion_keeps_voucher(self):
        txn = make_transaction()
        voucher = txn.voucher_code
        txn.mark_completed()
        txn.mark_completed()
        assert txn.voucher_code == voucher

    def test_failure_after_completion_is_refused(self):
        txn = make_transaction()
        txn.mark_completed()
        with pytest.raises(InvalidTransition):
            txn.mark_failed(reason='late failure')
        assert txn.status is TransactionStatus.COMPLETED
        assert txn.failed_at is None

    def test_mark_failed(self):
        txn = make_transaction()
        txn.mark_failed(reason='insufficient funds')
        assert txn.status is TransactionStatus.FAILED
        assert txn.failure_reason == 'insufficient funds'
        assert txn.failed_at

    def test_package_info_and_dict(self):
        txn = make_transaction(customer_phone='+2203456789')
        assert txn.package_info() == {
            'package_type': '24h',
            'package_name': '24 Hours',
            'amount': 25.0,
            'voucher_code': '24H-DEVICE-LP2Q3R4SABCDEF',
        }
        data = txn.to_dict()
        assert data['status'] == 'PENDING'
        assert data['amount'] == 25.0
        assert data['customer_phone'] == '+2203456789'
