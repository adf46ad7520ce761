"""
Unit tests for wallet services.
Covers transfers, withdrawals, token moves and ledger bookkeeping.
"""
from decimal import Decimal
from uuid import uuid4
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.contrib.auth import get_user_model

from apps.audit.models import AuditLog
from apps.core.exceptions import NotFoundError
from apps.ledger import services
from apps.ledger.models import (
    Wallet, WalletTransaction, WalletTransactionType, EntryStatus,
    WithdrawalRequest, WithdrawalStatus, PaymentTransaction, PaymentType,
)


User = get_user_model()


def fund(user, balance='0.00', tokens=0):
    Wallet.objects.filter(user_id=user.id).update(balance=Decimal(balance), tokens=tokens)


class WalletCreationTest(TestCase):
    def test_new_user_gets_empty_wallet(self):
        user = User.objects.create_user(username='w1', password='pw')
        wallet = Wallet.objects.get(user_id=user.id)
        self.assertEqual(wallet.balance, Decimal('0.00'))
        self.assertEqual(wallet.tokens, 0)

    def test_get_or_create_is_idempotent(self):
        user = User.objects.create_user(username='w2', password='pw')
        first = services.get_or_create_wallet(user.id)
        second = services.get_or_create_wallet(user.id)
        self.assertEqual(first.id, second.id)

    def test_database_rejects_negative_balance_and_tokens(self):
        user = User.objects.create_user(username='w3', password='pw')
        with self.assertRaises(IntegrityError), transaction.atomic():
            Wallet.objects.filter(user_id=user.id).update(balance=Decimal('-1.00'))
        with self.assertRaises(IntegrityError), transaction.atomic():
            Wallet.objects.filter(user_id=user.id).update(tokens=-1)


class MoneyParsingTest(TestCase):
    def test_rounds_to_cents(self):
        self.assertEqual(services.to_money('10.005'), Decimal('10.01'))

    def test_rejects_zero_and_negative(self):
        with self.assertRaises(ValueError):
            services.to_money(0)
        with self.assertRaises(ValueError):
            services.to_money('-5')

    def test_rejects_garbage(self):
        with self.assertRaises(ValueError):
            services.to_money('abc')

    def test_tokens_for_amount_floors(self):
        self.assertEqual(services.tokens_for_amount(Decimal('2999.99')), 2)
        self.assertEqual(services.tokens_for_amount(Decimal('999')), 0)


class TransferTest(TestCase):
    def setUp(self):
        self.alice = User.objects.create_user(username='alice', password='pw')
        self.bob = User.objects.create_user(username='bob', password='pw')
        fund(self.alice, '100.00')

    def test_transfer_moves_money_and_writes_ledger(self):
        result = services.transfer(self.alice.id, self.bob.id, Decimal('40.00'), 'rent')

        self.assertEqual(result.new_balance, Decimal('60.00'))
        self.assertEqual(Wallet.objects.get(user_id=self.alice.id).balance, Decimal('60.00'))
        self.assertEqual(Wallet.objects.get(user_id=self.bob.id).balance, Decimal('40.00'))

        out_entry = WalletTransaction.objects.get(user_id=self.alice.id)
        in_entry = WalletTransaction.objects.get(user_id=self.bob.id)
        self.assertEqual(out_entry.transaction_type, WalletTransactionType.TRANSFER_OUT)
        self.assertEqual(out_entry.amount, Decimal('-40.00'))
        self.assertEqual(out_entry.balance_after, Decimal('60.00'))
        self.assertEqual(out_entry.related_user_id, self.bob.id)
        self.assertEqual(in_entry.transaction_type, WalletTransactionType.TRANSFER_IN)
        self.assertEqual(in_entry.balance_after, Decimal('40.00'))

        payment = PaymentTransaction.objects.get(id=result.payment_id)
        self.assertEqual(payment.transaction_type, PaymentType.TRANSFER)
        self.assertTrue(AuditLog.objects.filter(action='WALLET_TRANSFER').exists())

    def test_insufficient_funds_changes_nothing(self):
        with self.assertRaisesMessage(ValueError, "Insufficient funds."):
            services.transfer(self.alice.id, self.bob.id, Decimal('100.01'))
        self.assertEqual(Wallet.objects.get(user_id=self.alice.id).balance, Decimal('100.00'))
        self.assertEqual(WalletTransaction.objects.count(), 0)

    def test_transfer_to_self_rejected(self):
        with self.assertRaises(ValueError):
            services.transfer(self.alice.id, self.alice.id, Decimal('1.00'))

    def test_missing_recipient_wallet(self):
        with self.assertRaises(NotFoundError):
            services.transfer(self.alice.id, uuid4(), Decimal('1.00'))
        self.assertEqual(Wallet.objects.get(user_id=self.alice.id).balance, Decimal('100.00'))

    def test_exact_balance_can_be_sent(self):
        result = services.transfer(self.alice.id, self.bob.id, Decimal('100.00'))
        self.assertEqual(result.new_balance, Decimal('0.00'))


class WithdrawalTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='payee', password='pw')
        self.admin = User.objects.create_user(username='boss', password='pw', role='ADMIN')
        fund(self.user, '500.00')

    def test_request_debits_immediately(self):
        req, balance = services.request_withdrawal(self.user.id, Decimal('200.00'), {'bank': 'VCB'})
        self.assertEqual(balance, Decimal('300.00'))
        self.assertEqual(req.status, WithdrawalStatus.PENDING)
        entry = WalletTransaction.objects.get(related_request_id=req.id)
        self.assertEqual(entry.status, EntryStatus.PENDING)
        self.assertEqual(entry.transaction_type, WalletTransactionType.WITHDRAWAL_REQUEST)

    def test_request_over_balance(self):
        with self.assertRaises(ValueError):
            services.request_withdrawal(self.user.id, Decimal('500.01'))

    def test_complete_withdrawal(self):
        req, _ = services.request_withdrawal(self.user.id, Decimal('200.00'))
        done = services.process_withdrawal(req.id, WithdrawalStatus.COMPLETED, self.admin.id)

        self.assertEqual(done.status, WithdrawalStatus.COMPLETED)
        wallet = Wallet.objects.get(user_id=self.user.id)
        self.assertEqual(wallet.balance, Decimal('300.00'))
        self.assertEqual(wallet.total_withdrawn, Decimal('200.00'))
        self.assertEqual(WalletTransaction.objects.get(related_request_id=req.id).status, EntryStatus.COMPLETED)

    def test_reject_withdrawal_refunds(self):
        req, _ = services.request_withdrawal(self.user.id, Decimal('200.00'))
        services.process_withdrawal(req.id, WithdrawalStatus.REJECTED, self.admin.id, 'bad account')

        wallet = Wallet.objects.get(user_id=self.user.id)
        self.assertEqual(wallet.balance, Decimal('500.00'))
        refund = WalletTransaction.objects.get(transaction_type=WalletTransactionType.WITHDRAWAL_REFUND)
        self.assertEqual(refund.amount, Decimal('200.00'))
        self.assertEqual(refund.balance_after, Decimal('500.00'))
        self.assertEqual(WithdrawalRequest.objects.get(id=req.id).admin_note, 'bad account')

    def test_cannot_process_twice(self):
        req, _ = services.request_withdrawal(self.user.id, Decimal('50.00'))
        services.process_withdrawal(req.id, WithdrawalStatus.REJECTED, self.admin.id)
        with self.assertRaisesMessage(ValueError, "already REJECTED"):
            services.process_withdrawal(req.id, WithdrawalStatus.COMPLETED, self.admin.id)
        self.assertEqual(Wallet.objects.get(user_id=self.user.id).balance, Decimal('500.00'))


class TokenMoveTest(TestCase):
    def setUp(self):
        self.fan = User.objects.create_user(username='fan', password='pw')
        self.star = User.objects.create_user(username='star', password='pw')
        fund(self.fan, tokens=10)

    def test_move_tokens(self):
        result = services.move_tokens(self.fan.id, self.star.id, 7, 'Rose x7')
        self.assertEqual(result.sender_tokens, 3)
        self.assertEqual(result.recipient_tokens, 7)
        self.assertEqual(
            WalletTransaction.objects.get(user_id=self.star.id).transaction_type,
            WalletTransactionType.GIFT_RECEIVED,
        )

    def test_not_enough_tokens(self):
        with self.assertRaisesMessage(ValueError, "Insufficient tokens."):
            services.move_tokens(self.fan.id, self.star.id, 11)
        self.assertEqual(Wallet.objects.get(user_id=self.fan.id).tokens, 10)


class DebitBalanceTest(TestCase):
    def test_debit_writes_negative_entry(self):
        user = User.objects.create_user(username='buyer', password='pw')
        fund(user, '80.00')
        entry = services.debit_balance(user.id, Decimal('30.00'), WalletTransactionType.PACKAGE_PURCHASE, 'Pro')
        self.assertEqual(entry.amount, Decimal('-30.00'))
        self.assertEqual(entry.balance_after, Decimal('50.00'))

    def test_debit_insufficient(self):
        user = User.objects.create_user(username='broke', password='pw')
        with self.assertRaisesMessage(ValueError, "Insufficient funds in your wallet."):
            services.debit_balance(user.id, Decimal('1.00'), WalletTransactionType.PACKAGE_PURCHASE)
