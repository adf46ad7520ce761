import uuid
from decimal import Decimal
from django.db import models


TOKEN_UNIT = Decimal('1000')  # currency units per token


class WalletTransactionType(models.TextChoices):
    """Kinds of wallet ledger entries."""
    DEPOSIT = 'DEPOSIT', 'Deposit'
    TOKEN_CREDIT = 'TOKEN_CREDIT', 'Token Credit'
    WITHDRAWAL_REQUEST = 'WITHDRAWAL_REQUEST', 'Withdrawal Request'
    WITHDRAWAL = 'WITHDRAWAL', 'Withdrawal'
    WITHDRAWAL_REFUND = 'WITHDRAWAL_REFUND', 'Withdrawal Refund'
    TRANSFER_IN = 'TRANSFER_IN', 'Transfer In'
    TRANSFER_OUT = 'TRANSFER_OUT', 'Transfer Out'
    PACKAGE_PURCHASE = 'PACKAGE_PURCHASE', 'Package Purchase'
    GIFT_SENT = 'GIFT_SENT', 'Gift Sent'
    GIFT_RECEIVED = 'GIFT_RECEIVED', 'Gift Received'


class EntryStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    FAILED = 'FAILED', 'Failed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class WithdrawalStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    REJECTED = 'REJECTED', 'Rejected'


class PaymentType(models.TextChoices):
    DEPOSIT = 'DEPOSIT', 'Deposit'
    WITHDRAW = 'WITHDRAW', 'Withdraw'
    DONATION = 'DONATION', 'Donation'
    BOOKING = 'BOOKING', 'Booking'
    SUBSCRIPTION = 'SUBSCRIPTION', 'Subscription'
    REFUND = 'REFUND', 'Refund'
    COMMISSION = 'COMMISSION', 'Commission'
    TRANSFER = 'TRANSFER', 'Transfer'


class PaymentStatus(models.TextChoices):
    """Payment transaction workflow states. Only PENDING can change."""
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    FAILED = 'FAILED', 'Failed'
    CANCELLED = 'CANCELLED', 'Cancelled'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'


class PaymentMethod(models.TextChoices):
    BANK_TRANSFER = 'BANK_TRANSFER', 'Bank Transfer'
    MOMO = 'MOMO', 'MoMo'
    ZALOPAY = 'ZALOPAY', 'ZaloPay'
    VNPAY = 'VNPAY', 'VNPay'
    PAYPAL = 'PAYPAL', 'PayPal'
    WALLET = 'WALLET', 'Wallet'
    CASH = 'CASH', 'Cash'


class DepositRequestStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    FAILED = 'FAILED', 'Failed'


class Wallet(models.Model):
    """
    One wallet per user. Holds a currency balance and an integer token
    balance (tokens are spent on gifts).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(unique=True, db_index=True)

    balance = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))
    tokens = models.BigIntegerField(default=0)
    frozen_balance = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))
    frozen_tokens = models.BigIntegerField(default=0)

    total_deposited = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))
    total_withdrawn = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))

    # Payout details
    bank_name = models.CharField(max_length=100, blank=True)
    bank_account_number = models.CharField(max_length=50, blank=True)
    bank_account_name = models.CharField(max_length=100, blank=True)
    paypal_email = models.EmailField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Wallet"
        verbose_name_plural = "Wallets"
        constraints = [
            models.CheckConstraint(condition=models.Q(balance__gte=0), name='wallet_balance_non_negative'),
            models.CheckConstraint(condition=models.Q(tokens__gte=0), name='wallet_tokens_non_negative'),
        ]

    def __str__(self):
        return f"Wallet {self.user_id}: {self.balance} / {self.tokens} tokens"


class WalletTransaction(models.Model):
    """
    Append-only wallet ledger.
    Every change to a wallet's balance or tokens writes one row here.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    wallet_id = models.UUIDField(db_index=True)
    user_id = models.UUIDField(db_index=True)

    transaction_type = models.CharField(max_length=30, choices=WalletTransactionType.choices)
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Positive for credits, negative for debits"
    )
    tokens = models.BigIntegerField(default=0, help_text="Signed token change")
    balance_after = models.DecimalField(max_digits=15, decimal_places=2)
    tokens_after = models.BigIntegerField(default=0)

    status = models.CharField(max_length=20, choices=EntryStatus.choices, default=EntryStatus.COMPLETED)
    description = models.CharField(max_length=255, blank=True)

    related_user_id = models.UUIDField(null=True, blank=True)
    related_request_id = models.UUIDField(null=True, blank=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Wallet Transaction"
        verbose_name_plural = "Wallet Transactions"

    def __str__(self):
        sign = "+" if self.amount > 0 else ""
        return f"{sign}{self.amount} ({self.transaction_type})"


class WithdrawalRequest(models.Model):
    """
    Cash-out request. The amount leaves the balance when the request is
    made and comes back if an admin rejects it.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(db_index=True)
    wallet_id = models.UUIDField(db_index=True)

    amount = models.DecimalField(max_digits=15, decimal_places=2)
    bank_detail = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=WithdrawalStatus.choices, default=WithdrawalStatus.PENDING)
    admin_note = models.TextField(blank=True)

    processed_by_id = models.UUIDField(null=True, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Withdrawal Request"
        verbose_name_plural = "Withdrawal Requests"

    def __str__(self):
        return f"Withdrawal {self.amount} ({self.status})"


class PaymentInfo(models.Model):
    """Platform bank accounts users transfer money to when depositing."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    bank_name = models.CharField(max_length=100)
    account_number = models.CharField(max_length=50)
    account_name = models.CharField(max_length=100)
    branch = models.CharField(max_length=100, blank=True)
    qr_code_url = models.URLField(max_length=500, blank=True)
    note = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['bank_name']
        verbose_name = "Payment Info"
        verbose_name_plural = "Payment Info"

    def __str__(self):
        return f"{self.bank_name} - {self.account_number}"


class PaymentTransaction(models.Model):
    """
    External payment records (deposits, withdrawals, transfers...).
    Status moves out of PENDING exactly once.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    from_user_id = models.UUIDField(db_index=True)
    to_user_id = models.UUIDField(null=True, blank=True, db_index=True)
    payment_info_id = models.UUIDField(null=True, blank=True)

    transaction_type = models.CharField(max_length=20, choices=PaymentType.choices)
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    token_amount = models.BigIntegerField(default=0)
    currency = models.CharField(max_length=3, default='VND')
    status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.BANK_TRANSFER)

    reference_id = models.CharField(max_length=100, blank=True, db_index=True)
    description = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    processed_by_id = models.UUIDField(null=True, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Payment Transaction"
        verbose_name_plural = "Payment Transactions"

    def __str__(self):
        return f"{self.transaction_type} {self.amount} {self.currency} ({self.status})"


class DepositRequest(models.Model):
    """
    Manual top-up: the user transfers money to a PaymentInfo account and
    quotes `code_pay`; an admin confirms it and the wallet gets tokens.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(db_index=True)
    payment_info_id = models.UUIDField(null=True, blank=True)

    amount = models.DecimalField(max_digits=15, decimal_places=2)
    code_pay = models.CharField(max_length=100)
    status = models.CharField(max_length=20, choices=DepositRequestStatus.choices, default=DepositRequestStatus.PENDING)
    metadata = models.JSONField(default=dict, blank=True)

    processed_by_id = models.UUIDField(null=True, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Deposit Request"
        verbose_name_plural = "Deposit Requests"

    def __str__(self):
        return f"Deposit {self.amount} [{self.code_pay}] ({self.status})"
