"""
Integration tests for wallet, payment and deposit request endpoints.
"""
import json
from decimal import Decimal
from uuid import uuid4
from django.test import TestCase, Client
from django.contrib.auth import get_user_model

from apps.identity.models import UserRole
from apps.ledger.models import (
    Wallet, WalletTransaction, PaymentTransaction, PaymentStatus, PaymentType,
    DepositRequest, DepositRequestStatus, PaymentInfo,
)


User = get_user_model()


class LedgerAPITestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(username='member', password='testpass123')
        self.other = User.objects.create_user(username='friend', password='testpass123')
        self.admin = User.objects.create_user(username='admin', password='testpass123', role=UserRole.ADMIN)
        self.guest = User.objects.create_user(username='guest', password='testpass123', role=UserRole.GUEST)
        Wallet.objects.filter(user_id=self.user.id).update(balance=Decimal('1000.00'))

    def post(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')

    def patch(self, url, payload):
        return self.client.patch(url, data=json.dumps(payload), content_type='application/json')


class WalletAPITest(LedgerAPITestCase):
    def test_wallet_requires_auth(self):
        response = self.client.get('/api/v1/wallet/')
        self.assertEqual(response.status_code, 401)

    def test_guest_has_no_wallet_access(self):
        self.client.force_login(self.guest)
        response = self.client.get('/api/v1/wallet/')
        self.assertEqual(response.status_code, 403)

    def test_get_wallet(self):
        self.client.force_login(self.user)
        response = self.client.get('/api/v1/wallet/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.json()['balance']), Decimal('1000.00'))

    def test_missing_wallet_is_404(self):
        Wallet.objects.filter(user_id=self.user.id).delete()
        self.client.force_login(self.user)
        response = self.client.get('/api/v1/wallet/')
        self.assertEqual(response.status_code, 404)

    def test_transfer_and_history(self):
        self.client.force_login(self.user)
        response = self.post('/api/v1/wallet/transfer', {
            'recipient_id': str(self.other.id), 'amount': '250.00', 'description': 'thanks',
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.json()['new_balance']), Decimal('750.00'))

        history = self.client.get('/api/v1/wallet/history').json()
        self.assertEqual(history['pagination']['total'], 1)
        self.assertEqual(history['items'][0]['transaction_type'], 'TRANSFER_OUT')

    def test_transfer_insufficient_funds(self):
        self.client.force_login(self.user)
        response = self.post('/api/v1/wallet/transfer', {
            'recipient_id': str(self.other.id), 'amount': '5000',
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['detail'], "Insufficient funds.")

    def test_transfer_unknown_recipient(self):
        self.client.force_login(self.user)
        response = self.post('/api/v1/wallet/transfer', {'recipient_id': str(uuid4()), 'amount': '10'})
        self.assertEqual(response.status_code, 404)

    def test_withdraw_then_admin_rejects(self):
        self.client.force_login(self.user)
        response = self.post('/api/v1/wallet/withdraw', {'amount': '300', 'bank_detail': {'bank': 'ACB'}})
        self.assertEqual(response.status_code, 201)
        request_id = response.json()['request']['id']
        self.assertEqual(Decimal(response.json()['new_balance']), Decimal('700.00'))

        # Regular users cannot process
        self.assertEqual(self.patch(f'/api/v1/wallet/withdrawals/{request_id}', {'status': 'REJECTED'}).status_code, 403)

        self.client.force_login(self.admin)
        response = self.patch(f'/api/v1/wallet/withdrawals/{request_id}', {'status': 'rejected'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Wallet.objects.get(user_id=self.user.id).balance, Decimal('1000.00'))

        again = self.patch(f'/api/v1/wallet/withdrawals/{request_id}', {'status': 'COMPLETED'})
        self.assertEqual(again.status_code, 400)

    def test_withdrawal_list_scoped_to_owner(self):
        self.client.force_login(self.user)
        self.post('/api/v1/wallet/withdraw', {'amount': '10'})
        self.client.force_login(self.other)
        self.assertEqual(self.client.get('/api/v1/wallet/withdrawals').json()['pagination']['total'], 0)
        self.client.force_login(self.admin)
        self.assertEqual(self.client.get('/api/v1/wallet/withdrawals').json()['pagination']['total'], 1)


class PaymentTransactionAPITest(LedgerAPITestCase):
    def test_deposit_completion_credits_wallet(self):
        self.client.force_login(self.user)
        response = self.post('/api/v1/transactions/deposit', {'amount': '25500', 'code_pay': 'PAY-1'})
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['token_amount'], 25)
        self.assertEqual(data['reference_id'], 'PAY-1')
        self.assertEqual(data['status'], 'PENDING')

        self.client.force_login(self.admin)
        response = self.patch(f"/api/v1/transactions/{data['id']}/status", {'status': 'COMPLETED'})
        self.assertEqual(response.status_code, 200)

        wallet = Wallet.objects.get(user_id=self.user.id)
        self.assertEqual(wallet.balance, Decimal('26500.00'))
        self.assertEqual(wallet.tokens, 25)
        self.assertEqual(wallet.total_deposited, Decimal('25500.00'))

    def test_status_only_changes_once(self):
        payment = PaymentTransaction.objects.create(
            from_user_id=self.user.id, transaction_type=PaymentType.DEPOSIT,
            amount=Decimal('1000'), token_amount=1, status=PaymentStatus.FAILED,
        )
        self.client.force_login(self.admin)
        response = self.patch(f'/api/v1/transactions/{payment.id}/status', {'status': 'COMPLETED'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Wallet.objects.get(user_id=self.user.id).tokens, 0)

    def test_withdraw_requires_balance(self):
        self.client.force_login(self.user)
        response = self.post('/api/v1/transactions/withdraw', {'amount': '1000.01'})
        self.assertEqual(response.status_code, 400)

    def test_withdraw_completion_debits(self):
        self.client.force_login(self.user)
        payment_id = self.post('/api/v1/transactions/withdraw', {'amount': '400'}).json()['id']
        self.client.force_login(self.admin)
        self.patch(f'/api/v1/transactions/{payment_id}/status', {'status': 'COMPLETED'})
        wallet = Wallet.objects.get(user_id=self.user.id)
        self.assertEqual(wallet.balance, Decimal('600.00'))
        self.assertEqual(wallet.total_withdrawn, Decimal('400.00'))

    def test_other_users_cannot_read_transaction(self):
        self.client.force_login(self.user)
        payment_id = self.post('/api/v1/transactions/deposit', {'amount': '1000', 'code_pay': 'X'}).json()['id']
        self.client.force_login(self.other)
        self.assertEqual(self.client.get(f'/api/v1/transactions/{payment_id}').status_code, 403)

    def test_list_filters_and_summary(self):
        self.client.force_login(self.user)
        self.post('/api/v1/transactions/deposit', {'amount': '1000', 'code_pay': 'A'})
        self.post('/api/v1/transactions/deposit', {'amount': '2000', 'code_pay': 'B'})
        self.post('/api/v1/transactions/withdraw', {'amount': '10'})

        listing = self.client.get('/api/v1/transactions/?type=deposit').json()
        self.assertEqual(listing['pagination']['total'], 2)

        summary = self.client.get('/api/v1/transactions/summary').json()
        deposit_row = next(r for r in summary if r['transaction_type'] == 'DEPOSIT')
        self.assertEqual(deposit_row['count'], 2)
        self.assertEqual(Decimal(deposit_row['total_amount']), Decimal('3000'))

    def test_completed_transactions_cannot_be_deleted(self):
        payment = PaymentTransaction.objects.create(
            from_user_id=self.user.id, transaction_type=PaymentType.TRANSFER,
            amount=Decimal('5'), status=PaymentStatus.COMPLETED,
        )
        self.client.force_login(self.admin)
        self.assertEqual(self.client.delete(f'/api/v1/transactions/{payment.id}').status_code, 400)


class DepositRequestAPITest(LedgerAPITestCase):
    def test_completed_request_grants_tokens(self):
        self.client.force_login(self.user)
        response = self.post('/api/v1/request-deposits/', {'amount': '5999', 'code_pay': 'DEP-9'})
        self.assertEqual(response.status_code, 201)
        request_id = response.json()['id']

        self.client.force_login(self.admin)
        response = self.patch(f'/api/v1/request-deposits/{request_id}', {'status': 'COMPLETED'})
        self.assertEqual(response.status_code, 200)

        wallet = Wallet.objects.get(user_id=self.user.id)
        self.assertEqual(wallet.tokens, 5)
        self.assertEqual(wallet.total_deposited, Decimal('5999.00'))
        self.assertEqual(wallet.balance, Decimal('1000.00'))
        self.assertTrue(WalletTransaction.objects.filter(related_request_id=request_id, tokens=5).exists())

    def test_request_cannot_be_reprocessed(self):
        req = DepositRequest.objects.create(
            user_id=self.user.id, amount=Decimal('1000'), code_pay='Z',
            status=DepositRequestStatus.FAILED,
        )
        self.client.force_login(self.admin)
        response = self.patch(f'/api/v1/request-deposits/{req.id}', {'status': 'COMPLETED'})
        self.assertEqual(response.status_code, 400)
        self.assertIn("already FAILED", response.json()['detail'])

    def test_owner_or_admin_can_read(self):
        req = DepositRequest.objects.create(user_id=self.user.id, amount=Decimal('1000'), code_pay='Q')
        self.client.force_login(self.other)
        self.assertEqual(self.client.get(f'/api/v1/request-deposits/{req.id}').status_code, 403)
        self.client.force_login(self.user)
        self.assertEqual(self.client.get(f'/api/v1/request-deposits/{req.id}').status_code, 200)

    def test_completed_request_cannot_be_deleted(self):
        req = DepositRequest.objects.create(
            user_id=self.user.id, amount=Decimal('1000'), code_pay='D',
            status=DepositRequestStatus.COMPLETED,
        )
        self.client.force_login(self.admin)
        self.assertEqual(self.client.delete(f'/api/v1/request-deposits/{req.id}').status_code, 400)


class PaymentInfoAPITest(LedgerAPITestCase):
    def test_admin_crud_and_public_list(self):
        self.client.force_login(self.admin)
        response = self.post('/api/v1/info-payments/', {
            'bank_name': 'Vietcombank', 'account_number': '0011', 'account_name': 'STREAMHUB',
        })
        self.assertEqual(response.status_code, 201)
        PaymentInfo.objects.create(bank_name='ACB', account_number='22', account_name='SH')
        PaymentInfo.objects.create(bank_name='Old', account_number='33', account_name='SH', is_active=False)

        self.client.force_login(self.user)
        public = self.client.get('/api/v1/info-payments/public').json()
        self.assertEqual([p['bank_name'] for p in public], ['ACB', 'Vietcombank'])

        self.assertEqual(self.client.get('/api/v1/info-payments/').status_code, 403)
