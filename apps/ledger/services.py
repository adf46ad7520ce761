"""
Core services for Ledger app.
Handles wallets, the wallet ledger, transfers and withdrawals.

Every balance change runs inside transaction.atomic() with the wallet rows
locked (select_for_update). When two wallets are involved they are locked
in wallet-id order so opposite transfers cannot deadlock.
"""
import logging
from typing import List, Optional, Tuple
from uuid import UUID
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from django.db import transaction
from django.utils import timezone

from apps.audit.audit_service import log_action, AuditAction
from apps.core.exceptions import NotFoundError
from apps.core.pagination import PageMeta, paginate
from .models import (
    TOKEN_UNIT, Wallet, WalletTransaction, WalletTransactionType, EntryStatus,
    WithdrawalRequest, WithdrawalStatus, PaymentTransaction, PaymentType,
    PaymentStatus, PaymentMethod,
)
from .dtos import (
    WalletDTO, WalletTransactionDTO, TransferResultDTO, TokenMoveDTO,
    WithdrawalRequestDTO,
)

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


# =============================================================================
# Helpers
# =============================================================================

def to_money(value) -> Decimal:
    """Parse a positive currency amount, rounded to cents."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError("Amount must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValueError("Amount must be positive")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def tokens_for_amount(amount: Decimal) -> int:
    """Whole tokens bought by `amount` (1 token per 1000 currency units)."""
    return int(Decimal(amount) // TOKEN_UNIT)


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def _wallet_dto(wallet: Wallet) -> WalletDTO:
    return WalletDTO(
        id=wallet.id,
        user_id=wallet.user_id,
        balance=wallet.balance,
        tokens=wallet.tokens,
        frozen_balance=wallet.frozen_balance,
        frozen_tokens=wallet.frozen_tokens,
        total_deposited=wallet.total_deposited,
        total_withdrawn=wallet.total_withdrawn,
        updated_at=wallet.updated_at,
    )


def _entry_dto(entry: WalletTransaction) -> WalletTransactionDTO:
    return WalletTransactionDTO(
        id=entry.id,
        transaction_type=entry.transaction_type,
        amount=entry.amount,
        tokens=entry.tokens,
        balance_after=entry.balance_after,
        tokens_after=entry.tokens_after,
        status=entry.status,
        description=entry.description,
        related_user_id=entry.related_user_id,
        related_request_id=entry.related_request_id,
        created_at=entry.created_at,
    )


def _withdrawal_dto(req: WithdrawalRequest) -> WithdrawalRequestDTO:
    return WithdrawalRequestDTO(
        id=req.id,
        user_id=req.user_id,
        amount=req.amount,
        bank_detail=req.bank_detail,
        status=req.status,
        admin_note=req.admin_note,
        processed_by_id=req.processed_by_id,
        processed_at=req.processed_at,
        created_at=req.created_at,
    )


def record_entry(
    wallet: Wallet,
    transaction_type: str,
    amount: Decimal = Decimal('0.00'),
    tokens: int = 0,
    status: str = EntryStatus.COMPLETED,
    description: str = "",
    related_user_id: Optional[UUID] = None,
    related_request_id: Optional[UUID] = None,
) -> WalletTransaction:
    """
    Write one ledger row. Call after the wallet has been updated so that
    balance_after/tokens_after reflect the new state.
    """
    return WalletTransaction.objects.create(
        wallet_id=wallet.id,
        user_id=wallet.user_id,
        transaction_type=transaction_type,
        amount=amount,
        tokens=tokens,
        balance_after=wallet.balance,
        tokens_after=wallet.tokens,
        status=status,
        description=description[:255],
        related_user_id=related_user_id,
        related_request_id=related_request_id,
    )


def lock_wallet(user_id) -> Optional[Wallet]:
    """Lock and return the user's wallet. Must run inside transaction.atomic()."""
    return Wallet.objects.select_for_update().filter(user_id=user_id).first()


def lock_wallet_pair(first_user_id, second_user_id) -> Tuple[Optional[Wallet], Optional[Wallet]]:
    """Lock two wallets in a stable (wallet id) order."""
    first_user_id, second_user_id = _as_uuid(first_user_id), _as_uuid(second_user_id)
    wallets = {
        w.user_id: w
        for w in Wallet.objects.select_for_update()
        .filter(user_id__in=[first_user_id, second_user_id])
        .order_by('id')
    }
    return wallets.get(first_user_id), wallets.get(second_user_id)


# =============================================================================
# Wallet
# =============================================================================

def get_or_create_wallet(user_id) -> Wallet:
    """Get or create the wallet for a user."""
    wallet, created = Wallet.objects.get_or_create(user_id=user_id)
    if created:
        logger.info(f"Created wallet {wallet.id} for user {user_id}")
    return wallet


def get_wallet_dto(user_id) -> Optional[WalletDTO]:
    try:
        return _wallet_dto(Wallet.objects.get(user_id=user_id))
    except Wallet.DoesNotExist:
        return None


def get_balance(user_id) -> Decimal:
    wallet = Wallet.objects.filter(user_id=user_id).only('balance').first()
    return wallet.balance if wallet else Decimal('0.00')


def list_wallet_history(user_id, page: int = 1, limit: int = 20) -> Optional[Tuple[List[WalletTransactionDTO], PageMeta]]:
    """Ledger entries for the user's wallet, newest first. None if the user has no wallet."""
    wallet = Wallet.objects.filter(user_id=user_id).first()
    if not wallet:
        return None
    qs = WalletTransaction.objects.filter(wallet_id=wallet.id).order_by('-created_at')
    rows, meta = paginate(qs, page, limit)
    return [_entry_dto(e) for e in rows], meta


# =============================================================================
# Transfers
# =============================================================================

def transfer(sender_id, recipient_id, amount, description: str = "") -> TransferResultDTO:
    """
    Move `amount` from the sender's balance to the recipient's balance.

    Raises:
        ValueError: self transfer, invalid amount or insufficient funds.
        NotFoundError: recipient has no wallet.
    """
    amount = to_money(amount)
    sender_id, recipient_id = _as_uuid(sender_id), _as_uuid(recipient_id)
    if sender_id == recipient_id:
        raise ValueError("You cannot transfer to yourself.")

    with transaction.atomic():
        sender, recipient = lock_wallet_pair(sender_id, recipient_id)
        if sender is None or sender.balance < amount:
            raise ValueError("Insufficient funds.")
        if recipient is None:
            raise NotFoundError("Recipient wallet not found.")

        sender.balance -= amount
        sender.save(update_fields=['balance', 'updated_at'])
        recipient.balance += amount
        recipient.save(update_fields=['balance', 'updated_at'])

        payment = PaymentTransaction.objects.create(
            from_user_id=sender_id,
            to_user_id=recipient_id,
            transaction_type=PaymentType.TRANSFER,
            amount=amount,
            status=PaymentStatus.COMPLETED,
            payment_method=PaymentMethod.WALLET,
            description=description,
            processed_at=timezone.now(),
        )
        record_entry(
            sender, WalletTransactionType.TRANSFER_OUT, amount=-amount,
            description=description or "Transfer sent",
            related_user_id=recipient_id, related_request_id=payment.id,
        )
        record_entry(
            recipient, WalletTransactionType.TRANSFER_IN, amount=amount,
            description=description or "Transfer received",
            related_user_id=sender_id, related_request_id=payment.id,
        )

    logger.info(f"Transfer {payment.id}: {amount} from {sender_id} to {recipient_id}")
    log_action(
        action=AuditAction.WALLET_TRANSFER,
        target_type="Wallet",
        target_id=sender.id,
        target_label=f"Transfer {amount} to {recipient_id}",
        performed_by=sender_id,
        context={"amount": str(amount), "recipient_id": str(recipient_id), "payment_id": str(payment.id)},
    )
    return TransferResultDTO(
        payment_id=payment.id,
        sender_id=sender_id,
        recipient_id=recipient_id,
        amount=amount,
        new_balance=sender.balance,
    )


def debit_balance(
    user_id,
    amount,
    transaction_type: str,
    description: str = "",
    related_request_id: Optional[UUID] = None,
    insufficient_message: str = "Insufficient funds in your wallet.",
) -> WalletTransaction:
    """
    Take `amount` from a user's balance for a purchase.
    Joins the caller's transaction when there is one.
    """
    amount = to_money(amount)
    with transaction.atomic():
        wallet = lock_wallet(user_id)
        if wallet is None:
            raise NotFoundError("Wallet not found.")
        if wallet.balance < amount:
            raise ValueError(insufficient_message)
        wallet.balance -= amount
        wallet.save(update_fields=['balance', 'updated_at'])
        return record_entry(
            wallet, transaction_type, amount=-amount,
            description=description, related_request_id=related_request_id,
        )


def move_tokens(
    sender_id,
    recipient_id,
    tokens: int,
    description: str = "",
    related_request_id: Optional[UUID] = None,
) -> TokenMoveDTO:
    """Move whole tokens between two wallets (gifts)."""
    if tokens <= 0:
        raise ValueError("Token amount must be positive")
    sender_id, recipient_id = _as_uuid(sender_id), _as_uuid(recipient_id)
    if sender_id == recipient_id:
        raise ValueError("You cannot send tokens to yourself.")

    # Recipient wallets are created lazily; do it before taking locks
    get_or_create_wallet(recipient_id)

    with transaction.atomic():
        sender, recipient = lock_wallet_pair(sender_id, recipient_id)
        if sender is None or sender.tokens < tokens:
            raise ValueError("Insufficient tokens.")

        sender.tokens -= tokens
        sender.save(update_fields=['tokens', 'updated_at'])
        recipient.tokens += tokens
        recipient.save(update_fields=['tokens', 'updated_at'])

        record_entry(
            sender, WalletTransactionType.GIFT_SENT, tokens=-tokens,
            description=description, related_user_id=recipient_id,
            related_request_id=related_request_id,
        )
        record_entry(
            recipient, WalletTransactionType.GIFT_RECEIVED, tokens=tokens,
            description=description, related_user_id=sender_id,
            related_request_id=related_request_id,
        )

    return TokenMoveDTO(sender_tokens=sender.tokens, recipient_tokens=recipient.tokens, tokens=tokens)


# =============================================================================
# Withdrawals
# =============================================================================

def request_withdrawal(user_id, amount, bank_detail: Optional[dict] = None) -> Tuple[WithdrawalRequestDTO, Decimal]:
    """
    Reserve `amount` for a payout. The balance is debited now; the ledger
    entry stays PENDING until an admin processes the request.

    Returns:
        (withdrawal request, new balance)
    """
    amount = to_money(amount)
    with transaction.atomic():
        wallet = lock_wallet(user_id)
        if wallet is None:
            raise NotFoundError("Wallet not found.")
        if wallet.balance < amount:
            raise ValueError("Insufficient funds.")

        wallet.balance -= amount
        wallet.save(update_fields=['balance', 'updated_at'])

        req = WithdrawalRequest.objects.create(
            user_id=wallet.user_id,
            wallet_id=wallet.id,
            amount=amount,
            bank_detail=bank_detail or {},
        )
        record_entry(
            wallet, WalletTransactionType.WITHDRAWAL_REQUEST, amount=-amount,
            status=EntryStatus.PENDING, description="Withdrawal request",
            related_request_id=req.id,
        )

    logger.info(f"Withdrawal request {req.id}: {amount} by user {user_id}")
    log_action(
        action=AuditAction.WITHDRAWAL_REQUESTED,
        target_type="WithdrawalRequest",
        target_id=req.id,
        target_label=f"Withdrawal {amount}",
        performed_by=user_id,
        context={"amount": str(amount)},
    )
    return _withdrawal_dto(req), wallet.balance


def list_withdrawals(user_id=None, status: Optional[str] = None, page: int = 1, limit: int = 20) -> Tuple[List[WithdrawalRequestDTO], PageMeta]:
    """List withdrawal requests; user_id=None lists everybody's (admin)."""
    qs = WithdrawalRequest.objects.all()
    if user_id:
        qs = qs.filter(user_id=user_id)
    if status:
        qs = qs.filter(status=status)
    rows, meta = paginate(qs, page, limit)
    return [_withdrawal_dto(r) for r in rows], meta


def process_withdrawal(request_id, status: str, processed_by_id, admin_note: str = "") -> WithdrawalRequestDTO:
    """
    Complete or reject a pending withdrawal.

    COMPLETED: the reserved amount counts towards total_withdrawn.
    REJECTED: the reserved amount goes back to the balance.
    """
    if status not in (WithdrawalStatus.COMPLETED, WithdrawalStatus.REJECTED):
        raise ValueError("Status must be COMPLETED or REJECTED")

    with transaction.atomic():
        req = WithdrawalRequest.objects.select_for_update().filter(id=request_id).first()
        if req is None:
            raise NotFoundError("Withdrawal request not found")
        if req.status != WithdrawalStatus.PENDING:
            raise ValueError(f"Cannot update a request that is already {req.status}")

        wallet = lock_wallet(req.user_id)
        if wallet is None:
            raise NotFoundError("Wallet not found.")

        pending_entries = WalletTransaction.objects.filter(
            related_request_id=req.id,
            transaction_type=WalletTransactionType.WITHDRAWAL_REQUEST,
            status=EntryStatus.PENDING,
        )
        if status == WithdrawalStatus.COMPLETED:
            wallet.total_withdrawn += req.amount
            wallet.save(update_fields=['total_withdrawn', 'updated_at'])
            pending_entries.update(status=EntryStatus.COMPLETED)
        else:
            wallet.balance += req.amount
            wallet.save(update_fields=['balance', 'updated_at'])
            pending_entries.update(status=EntryStatus.CANCELLED)
            record_entry(
                wallet, WalletTransactionType.WITHDRAWAL_REFUND, amount=req.amount,
                description="Withdrawal rejected", related_request_id=req.id,
            )

        req.status = status
        req.admin_note = admin_note or req.admin_note
        req.processed_by_id = processed_by_id
        req.processed_at = timezone.now()
        req.save()

    logger.info(f"Withdrawal {req.id} -> {status} by {processed_by_id}")
    log_action(
        action=AuditAction.WITHDRAWAL_PROCESSED,
        target_type="WithdrawalRequest",
        target_id=req.id,
        target_label=f"Withdrawal {req.amount} {status}",
        performed_by=processed_by_id,
        context={"status": status, "amount": str(req.amount)},
    )
    return _withdrawal_dto(req)
