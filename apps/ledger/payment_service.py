"""
Payment transactions, manual deposit requests and platform payment accounts.

Payment transactions and deposit requests follow the same workflow:
created PENDING by the user, then moved exactly once to a final status by
an admin. Completion is what touches the wallet.
"""
import logging
from datetime import date
from typing import List, Optional, Tuple
from uuid import UUID
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.audit.audit_service import log_action, AuditAction
from apps.core.exceptions import NotFoundError
from apps.core.pagination import PageMeta, paginate
from .models import (
    Wallet, WalletTransactionType, PaymentTransaction, PaymentType,
    PaymentStatus, PaymentMethod, DepositRequest, DepositRequestStatus,
    PaymentInfo,
)
from .dtos import (
    PaymentTransactionDTO, PaymentSummaryRowDTO, DepositRequestDTO, PaymentInfoDTO,
)
from .services import (
    to_money, tokens_for_amount, get_or_create_wallet, lock_wallet, record_entry,
)

logger = logging.getLogger(__name__)


# =============================================================================
# DTO Helpers
# =============================================================================

def _payment_dto(p: PaymentTransaction) -> PaymentTransactionDTO:
    return PaymentTransactionDTO(
        id=p.id,
        from_user_id=p.from_user_id,
        to_user_id=p.to_user_id,
        payment_info_id=p.payment_info_id,
        transaction_type=p.transaction_type,
        amount=p.amount,
        token_amount=p.token_amount,
        currency=p.currency,
        status=p.status,
        payment_method=p.payment_method,
        reference_id=p.reference_id,
        description=p.description,
        metadata=p.metadata,
        processed_by_id=p.processed_by_id,
        processed_at=p.processed_at,
        created_at=p.created_at,
    )


def _deposit_request_dto(d: DepositRequest) -> DepositRequestDTO:
    return DepositRequestDTO(
        id=d.id,
        user_id=d.user_id,
        payment_info_id=d.payment_info_id,
        amount=d.amount,
        code_pay=d.code_pay,
        status=d.status,
        metadata=d.metadata,
        processed_by_id=d.processed_by_id,
        processed_at=d.processed_at,
        created_at=d.created_at,
        updated_at=d.updated_at,
    )


def _payment_info_dto(info: PaymentInfo) -> PaymentInfoDTO:
    return PaymentInfoDTO(
        id=info.id,
        bank_name=info.bank_name,
        account_number=info.account_number,
        account_name=info.account_name,
        branch=info.branch,
        qr_code_url=info.qr_code_url,
        note=info.note,
        is_active=info.is_active,
        created_at=info.created_at,
    )


def _check_payment_info(payment_info_id: Optional[UUID]) -> None:
    if payment_info_id and not PaymentInfo.objects.filter(id=payment_info_id, is_active=True).exists():
        raise NotFoundError("Payment info not found")


# =============================================================================
# Payment Transactions
# =============================================================================

def create_deposit(
    user_id: UUID,
    amount,
    code_pay: str,
    payment_info_id: Optional[UUID] = None,
    payment_method: str = PaymentMethod.BANK_TRANSFER,
    description: str = "",
) -> PaymentTransactionDTO:
    """Record a pending deposit; tokens are granted when it completes."""
    amount = to_money(amount)
    if payment_method not in PaymentMethod.values:
        raise ValueError(f"Unknown payment method: {payment_method}")
    _check_payment_info(payment_info_id)

    payment = PaymentTransaction.objects.create(
        from_user_id=user_id,
        payment_info_id=payment_info_id,
        transaction_type=PaymentType.DEPOSIT,
        amount=amount,
        token_amount=tokens_for_amount(amount),
        payment_method=payment_method,
        reference_id=code_pay,
        description=description or "Deposit",
    )
    logger.info(f"Deposit {payment.id} created: {amount} by {user_id}")
    return _payment_dto(payment)


def create_withdraw(
    user_id: UUID,
    amount,
    payment_method: str = PaymentMethod.BANK_TRANSFER,
    bank_info: Optional[dict] = None,
    description: str = "",
) -> PaymentTransactionDTO:
    """Record a pending withdraw if the current balance covers it."""
    amount = to_money(amount)
    if payment_method not in PaymentMethod.values:
        raise ValueError(f"Unknown payment method: {payment_method}")
    wallet = Wallet.objects.filter(user_id=user_id).first()
    if wallet is None or wallet.balance < amount:
        raise ValueError("Insufficient balance")

    payment = PaymentTransaction.objects.create(
        from_user_id=user_id,
        transaction_type=PaymentType.WITHDRAW,
        amount=amount,
        payment_method=payment_method,
        description=description or "Withdraw",
        metadata={"bank_info": bank_info or {}},
    )
    logger.info(f"Withdraw {payment.id} created: {amount} by {user_id}")
    return _payment_dto(payment)


def list_payments(
    user_id: Optional[UUID] = None,
    status: Optional[str] = None,
    transaction_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[PaymentTransactionDTO], PageMeta]:
    """
    List payment transactions, newest first.
    With a user_id, only transactions the user sent or received.
    """
    qs = PaymentTransaction.objects.all()
    if user_id:
        qs = qs.filter(Q(from_user_id=user_id) | Q(to_user_id=user_id))
    if status:
        qs = qs.filter(status=status)
    if transaction_type:
        qs = qs.filter(transaction_type=transaction_type)
    if start_date:
        qs = qs.filter(created_at__date__gte=start_date)
    if end_date:
        qs = qs.filter(created_at__date__lte=end_date)

    rows, meta = paginate(qs.order_by('-created_at'), page, limit)
    return [_payment_dto(p) for p in rows], meta


def get_payment(payment_id) -> Optional[PaymentTransactionDTO]:
    try:
        return _payment_dto(PaymentTransaction.objects.get(id=payment_id))
    except PaymentTransaction.DoesNotExist:
        return None


def update_payment_status(payment_id, status: str, processed_by_id: UUID, note: str = "") -> PaymentTransactionDTO:
    """
    Move a pending payment to its final status.

    Completing a deposit credits balance, tokens and total_deposited.
    Completing a withdraw debits the balance and grows total_withdrawn.
    """
    if status not in PaymentStatus.values or status == PaymentStatus.PENDING:
        raise ValueError(f"Invalid status: {status}")

    with transaction.atomic():
        payment = PaymentTransaction.objects.select_for_update().filter(id=payment_id).first()
        if payment is None:
            raise NotFoundError("Transaction not found")
        if payment.status != PaymentStatus.PENDING:
            raise ValueError(f"Cannot update a transaction that is already {payment.status}")

        if status == PaymentStatus.COMPLETED:
            if payment.transaction_type == PaymentType.DEPOSIT:
                _complete_deposit(payment)
            elif payment.transaction_type == PaymentType.WITHDRAW:
                _complete_withdraw(payment)

        payment.status = status
        payment.processed_by_id = processed_by_id
        payment.processed_at = timezone.now()
        if note:
            payment.metadata = {**payment.metadata, "admin_note": note}
        payment.save()

    logger.info(f"Payment {payment.id} ({payment.transaction_type}) -> {status} by {processed_by_id}")
    log_action(
        action=AuditAction.PAYMENT_STATUS_CHANGED,
        target_type="PaymentTransaction",
        target_id=payment.id,
        target_label=f"{payment.transaction_type} {payment.amount} -> {status}",
        performed_by=processed_by_id,
        context={"status": status, "amount": str(payment.amount)},
    )
    return _payment_dto(payment)


def _complete_deposit(payment: PaymentTransaction) -> None:
    get_or_create_wallet(payment.from_user_id)
    wallet = lock_wallet(payment.from_user_id)
    wallet.balance += payment.amount
    wallet.tokens += payment.token_amount
    wallet.total_deposited += payment.amount
    wallet.save(update_fields=['balance', 'tokens', 'total_deposited', 'updated_at'])
    record_entry(
        wallet, WalletTransactionType.DEPOSIT, amount=payment.amount,
        tokens=payment.token_amount, description=f"Deposit {payment.reference_id}".strip(),
        related_request_id=payment.id,
    )


def _complete_withdraw(payment: PaymentTransaction) -> None:
    wallet = lock_wallet(payment.from_user_id)
    if wallet is None or wallet.balance < payment.amount:
        raise ValueError("Insufficient balance to complete withdrawal")
    wallet.balance -= payment.amount
    wallet.total_withdrawn += payment.amount
    wallet.save(update_fields=['balance', 'total_withdrawn', 'updated_at'])
    record_entry(
        wallet, WalletTransactionType.WITHDRAWAL, amount=-payment.amount,
        description="Withdraw", related_request_id=payment.id,
    )


def delete_payment(payment_id, deleted_by_id: UUID) -> None:
    try:
        payment = PaymentTransaction.objects.get(id=payment_id)
    except PaymentTransaction.DoesNotExist:
        raise NotFoundError("Transaction not found")
    if payment.status == PaymentStatus.COMPLETED:
        raise ValueError("Completed transactions cannot be deleted")

    log_action(
        action=AuditAction.PAYMENT_DELETED,
        target_type="PaymentTransaction",
        target_id=payment.id,
        target_label=f"{payment.transaction_type} {payment.amount} ({payment.status})",
        performed_by=deleted_by_id,
    )
    payment.delete()


def payment_summary(user_id: UUID) -> List[PaymentSummaryRowDTO]:
    """Count and total amount per (type, status) for one user."""
    rows = (
        PaymentTransaction.objects
        .filter(Q(from_user_id=user_id) | Q(to_user_id=user_id))
        .values('transaction_type', 'status')
        .annotate(count=Count('id'), total_amount=Sum('amount'))
        .order_by('transaction_type', 'status')
    )
    return [
        PaymentSummaryRowDTO(
            transaction_type=row['transaction_type'],
            status=row['status'],
            count=row['count'],
            total_amount=row['total_amount'],
        )
        for row in rows
    ]


# =============================================================================
# Deposit Requests
# =============================================================================

def create_deposit_request(
    user_id: UUID,
    amount,
    code_pay: str,
    payment_info_id: Optional[UUID] = None,
    metadata: Optional[dict] = None,
) -> DepositRequestDTO:
    amount = to_money(amount)
    if not code_pay or not code_pay.strip():
        raise ValueError("code_pay is required")
    _check_payment_info(payment_info_id)

    req = DepositRequest.objects.create(
        user_id=user_id,
        payment_info_id=payment_info_id,
        amount=amount,
        code_pay=code_pay.strip(),
        metadata=metadata or {},
    )
    logger.info(f"Deposit request {req.id}: {amount} [{req.code_pay}] by {user_id}")
    return _deposit_request_dto(req)


def list_deposit_requests(
    user_id: Optional[UUID] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[DepositRequestDTO], PageMeta]:
    qs = DepositRequest.objects.all()
    if user_id:
        qs = qs.filter(user_id=user_id)
    if status:
        qs = qs.filter(status=status)
    rows, meta = paginate(qs, page, limit)
    return [_deposit_request_dto(r) for r in rows], meta


def get_deposit_request(request_id) -> Optional[DepositRequestDTO]:
    try:
        return _deposit_request_dto(DepositRequest.objects.get(id=request_id))
    except DepositRequest.DoesNotExist:
        return None


def update_deposit_request_status(request_id, status: str, processed_by_id: UUID) -> DepositRequestDTO:
    """
    Close a pending deposit request.
    COMPLETED grants floor(amount / 1000) tokens and grows total_deposited.
    """
    if status not in (DepositRequestStatus.COMPLETED, DepositRequestStatus.FAILED):
        raise ValueError("Status must be COMPLETED or FAILED")

    with transaction.atomic():
        req = DepositRequest.objects.select_for_update().filter(id=request_id).first()
        if req is None:
            raise NotFoundError("Deposit request not found")
        if req.status != DepositRequestStatus.PENDING:
            raise ValueError(f"Cannot update a request that is already {req.status}")

        if status == DepositRequestStatus.COMPLETED:
            tokens = tokens_for_amount(req.amount)
            get_or_create_wallet(req.user_id)
            wallet = lock_wallet(req.user_id)
            wallet.tokens += tokens
            wallet.total_deposited += req.amount
            wallet.save(update_fields=['tokens', 'total_deposited', 'updated_at'])
            record_entry(
                wallet, WalletTransactionType.TOKEN_CREDIT, tokens=tokens,
                description=f"Deposit request {req.code_pay}", related_request_id=req.id,
            )

        req.status = status
        req.processed_by_id = processed_by_id
        req.processed_at = timezone.now()
        req.save()

    logger.info(f"Deposit request {req.id} -> {status} by {processed_by_id}")
    log_action(
        action=AuditAction.DEPOSIT_REQUEST_PROCESSED,
        target_type="DepositRequest",
        target_id=req.id,
        target_label=f"Deposit {req.amount} [{req.code_pay}] -> {status}",
        performed_by=processed_by_id,
        context={"status": status, "amount": str(req.amount)},
    )
    return _deposit_request_dto(req)


def delete_deposit_request(request_id) -> None:
    try:
        req = DepositRequest.objects.get(id=request_id)
    except DepositRequest.DoesNotExist:
        raise NotFoundError("Deposit request not found")
    if req.status == DepositRequestStatus.COMPLETED:
        raise ValueError("Completed deposit requests cannot be deleted")
    req.delete()


# =============================================================================
# Payment Info
# =============================================================================

def list_payment_info(active_only: bool = False, page: int = 1, limit: int = 20) -> Tuple[List[PaymentInfoDTO], PageMeta]:
    qs = PaymentInfo.objects.all()
    if active_only:
        qs = qs.filter(is_active=True)
    rows, meta = paginate(qs.order_by('bank_name'), page, limit)
    return [_payment_info_dto(i) for i in rows], meta


def list_active_payment_info() -> List[PaymentInfoDTO]:
    return [_payment_info_dto(i) for i in PaymentInfo.objects.filter(is_active=True).order_by('bank_name')]


def get_payment_info(info_id) -> Optional[PaymentInfoDTO]:
    try:
        return _payment_info_dto(PaymentInfo.objects.get(id=info_id))
    except PaymentInfo.DoesNotExist:
        return None


def create_payment_info(data: dict) -> PaymentInfoDTO:
    for required in ('bank_name', 'account_number', 'account_name'):
        if not (data.get(required) or '').strip():
            raise ValueError(f"{required} is required")
    info = PaymentInfo.objects.create(**data)
    return _payment_info_dto(info)


def update_payment_info(info_id, data: dict) -> Optional[PaymentInfoDTO]:
    try:
        info = PaymentInfo.objects.get(id=info_id)
    except PaymentInfo.DoesNotExist:
        return None
    for key, value in data.items():
        if value is not None:
            setattr(info, key, value)
    info.save()
    return _payment_info_dto(info)


def delete_payment_info(info_id) -> bool:
    deleted, _ = PaymentInfo.objects.filter(id=info_id).delete()
    return deleted > 0
