"""
API Routers for Ledger app.
Wallet, payment transaction, deposit request and payment info endpoints.
"""
from typing import List, Optional
from uuid import UUID
from datetime import date
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.core import rate_limit
from apps.core.exceptions import status_for
from apps.identity.permissions import Permissions, is_admin
from apps.identity.security import require_auth, require_permission
from .schemas import (
    TransferIn, WithdrawalIn, WithdrawalProcessIn, DepositIn, WithdrawIn,
    PaymentStatusIn, DepositRequestIn, DepositRequestStatusIn, PaymentInfoIn,
    PaymentInfoUpdateIn, WalletOut, WalletHistoryOut, TransferOut,
    WithdrawalRequestOut, WithdrawalCreatedOut, WithdrawalPageOut,
    PaymentTransactionOut, PaymentPageOut, PaymentSummaryRowOut,
    DepositRequestOut, DepositRequestPageOut, PaymentInfoOut, PaymentInfoPageOut,
)
from . import services
from . import payment_service

wallet_router = Router(tags=["Wallet"])
payments_router = Router(tags=["Payments"])
deposits_router = Router(tags=["Deposit Requests"])
payment_info_router = Router(tags=["Payment Info"])


# =============================================================================
# Wallet Endpoints
# =============================================================================

@wallet_router.get("", response=WalletOut, auth=None)
def get_wallet(request: HttpRequest):
    """Current user's wallet."""
    user = require_permission(request, Permissions.WALLET_USE)
    wallet = services.get_wallet_dto(user.id)
    if not wallet:
        raise HttpError(404, "Wallet not found.")
    return wallet


@wallet_router.get("/history", response=WalletHistoryOut, auth=None)
def get_wallet_history(request: HttpRequest, page: int = 1, limit: int = 20):
    """Ledger entries of the current user's wallet, newest first."""
    user = require_permission(request, Permissions.WALLET_USE)
    result = services.list_wallet_history(user.id, page, limit)
    if result is None:
        raise HttpError(404, "Wallet not found.")
    items, meta = result
    return {"items": items, "pagination": meta}


@wallet_router.post("/transfer", response=TransferOut, auth=None)
def transfer(request: HttpRequest, payload: TransferIn):
    """Send money from the current user's balance to another user."""
    user = require_permission(request, Permissions.WALLET_USE)
    rate_limit.enforce(request, 'transfer', identity=str(user.id))

    try:
        result = services.transfer(user.id, payload.recipient_id, payload.amount, payload.description)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))

    return TransferOut(
        message="Transfer successful.",
        payment_id=result.payment_id,
        amount=result.amount,
        new_balance=result.new_balance,
    )


@wallet_router.post("/withdraw", response={201: WithdrawalCreatedOut}, auth=None)
def request_withdrawal(request: HttpRequest, payload: WithdrawalIn):
    """Reserve part of the balance for a payout."""
    user = require_permission(request, Permissions.WALLET_USE)
    try:
        req, new_balance = services.request_withdrawal(user.id, payload.amount, payload.bank_detail)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 201, {"message": "Withdrawal request submitted.", "request": req, "new_balance": new_balance}


@wallet_router.get("/withdrawals", response=WithdrawalPageOut, auth=None)
def list_withdrawals(request: HttpRequest, status: Optional[str] = None, page: int = 1, limit: int = 20):
    """Own withdrawal requests; admins see everyone's."""
    user = require_permission(request, Permissions.WALLET_USE)
    owner = None if is_admin(user) else user.id
    items, meta = services.list_withdrawals(owner, status, page, limit)
    return {"items": items, "pagination": meta}


@wallet_router.patch("/withdrawals/{request_id}", response=WithdrawalRequestOut, auth=None)
def process_withdrawal(request: HttpRequest, request_id: UUID, payload: WithdrawalProcessIn):
    """Complete or reject a withdrawal request (admin)."""
    user = require_permission(request, Permissions.LEDGER_MANAGE)
    try:
        return services.process_withdrawal(request_id, payload.status.upper(), user.id, payload.admin_note)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


# =============================================================================
# Payment Transaction Endpoints
# =============================================================================

@payments_router.post("/deposit", response={201: PaymentTransactionOut}, auth=None)
def create_deposit(request: HttpRequest, payload: DepositIn):
    user = require_permission(request, Permissions.WALLET_USE)
    try:
        payment = payment_service.create_deposit(
            user_id=user.id,
            amount=payload.amount,
            code_pay=payload.code_pay,
            payment_info_id=payload.payment_info_id,
            payment_method=payload.payment_method.upper(),
            description=payload.description,
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 201, payment


@payments_router.post("/withdraw", response={201: PaymentTransactionOut}, auth=None)
def create_withdraw(request: HttpRequest, payload: WithdrawIn):
    user = require_permission(request, Permissions.WALLET_USE)
    try:
        payment = payment_service.create_withdraw(
            user_id=user.id,
            amount=payload.amount,
            payment_method=payload.payment_method.upper(),
            bank_info=payload.bank_info,
            description=payload.description,
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 201, payment


@payments_router.get("", response=PaymentPageOut, auth=None)
def list_payments(
    request: HttpRequest,
    status: Optional[str] = None,
    type: Optional[str] = None,
    user_id: Optional[UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    limit: int = 20,
):
    """
    List payment transactions.
    Regular users see transactions they sent or received; admins see all
    or filter by user_id.
    """
    user = require_permission(request, Permissions.WALLET_USE)
    owner = user_id if is_admin(user) else user.id
    items, meta = payment_service.list_payments(
        user_id=owner,
        status=status.upper() if status else None,
        transaction_type=type.upper() if type else None,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return {"items": items, "pagination": meta}


@payments_router.get("/summary", response=List[PaymentSummaryRowOut], auth=None)
def get_payment_summary(request: HttpRequest, user_id: Optional[UUID] = None):
    """Count and total per (type, status)."""
    user = require_permission(request, Permissions.WALLET_USE)
    target = user_id if (user_id and is_admin(user)) else user.id
    return payment_service.payment_summary(target)


@payments_router.get("/{payment_id}", response=PaymentTransactionOut, auth=None)
def get_payment(request: HttpRequest, payment_id: UUID):
    user = require_permission(request, Permissions.WALLET_USE)
    payment = payment_service.get_payment(payment_id)
    if not payment:
        raise HttpError(404, "Transaction not found")
    if not is_admin(user) and user.id not in (payment.from_user_id, payment.to_user_id):
        raise HttpError(403, "You do not have access to this transaction")
    return payment


@payments_router.patch("/{payment_id}/status", response=PaymentTransactionOut, auth=None)
def update_payment_status(request: HttpRequest, payment_id: UUID, payload: PaymentStatusIn):
    """Approve, complete, fail or cancel a pending transaction (admin)."""
    user = require_permission(request, Permissions.LEDGER_MANAGE)
    try:
        return payment_service.update_payment_status(payment_id, payload.status.upper(), user.id, payload.note)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@payments_router.delete("/{payment_id}", response={204: None}, auth=None)
def delete_payment(request: HttpRequest, payment_id: UUID):
    user = require_permission(request, Permissions.LEDGER_MANAGE)
    try:
        payment_service.delete_payment(payment_id, user.id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 204, None


# =============================================================================
# Deposit Request Endpoints
# =============================================================================

@deposits_router.post("", response={201: DepositRequestOut}, auth=None)
def create_deposit_request(request: HttpRequest, payload: DepositRequestIn):
    user = require_permission(request, Permissions.WALLET_USE)
    try:
        req = payment_service.create_deposit_request(
            user_id=user.id,
            amount=payload.amount,
            code_pay=payload.code_pay,
            payment_info_id=payload.payment_info_id,
            metadata=payload.metadata,
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 201, req


@deposits_router.get("", response=DepositRequestPageOut, auth=None)
def list_deposit_requests(
    request: HttpRequest,
    status: Optional[str] = None,
    user_id: Optional[UUID] = None,
    page: int = 1,
    limit: int = 20,
):
    user = require_permission(request, Permissions.WALLET_USE)
    owner = user_id if is_admin(user) else user.id
    items, meta = payment_service.list_deposit_requests(
        owner, status.upper() if status else None, page, limit,
    )
    return {"items": items, "pagination": meta}


@deposits_router.get("/{request_id}", response=DepositRequestOut, auth=None)
def get_deposit_request(request: HttpRequest, request_id: UUID):
    user = require_permission(request, Permissions.WALLET_USE)
    req = payment_service.get_deposit_request(request_id)
    if not req:
        raise HttpError(404, "Deposit request not found")
    if req.user_id != user.id and not is_admin(user):
        raise HttpError(403, "You do not have access to this deposit request")
    return req


@deposits_router.patch("/{request_id}", response=DepositRequestOut, auth=None)
def update_deposit_request(request: HttpRequest, request_id: UUID, payload: DepositRequestStatusIn):
    user = require_permission(request, Permissions.LEDGER_MANAGE)
    try:
        return payment_service.update_deposit_request_status(request_id, payload.status.upper(), user.id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@deposits_router.delete("/{request_id}", response={204: None}, auth=None)
def delete_deposit_request(request: HttpRequest, request_id: UUID):
    require_permission(request, Permissions.LEDGER_MANAGE)
    try:
        payment_service.delete_deposit_request(request_id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 204, None


# =============================================================================
# Payment Info Endpoints
# =============================================================================

@payment_info_router.get("/public", response=List[PaymentInfoOut], auth=None)
def list_public_payment_info(request: HttpRequest):
    """Active platform accounts to deposit to."""
    require_auth(request)
    return payment_service.list_active_payment_info()


@payment_info_router.get("", response=PaymentInfoPageOut, auth=None)
def list_payment_info(request: HttpRequest, active_only: bool = False, page: int = 1, limit: int = 20):
    require_permission(request, Permissions.LEDGER_MANAGE)
    items, meta = payment_service.list_payment_info(active_only, page, limit)
    return {"items": items, "pagination": meta}


@payment_info_router.get("/{info_id}", response=PaymentInfoOut, auth=None)
def get_payment_info(request: HttpRequest, info_id: UUID):
    require_permission(request, Permissions.LEDGER_MANAGE)
    info = payment_service.get_payment_info(info_id)
    if not info:
        raise HttpError(404, "Payment info not found")
    return info


@payment_info_router.post("", response={201: PaymentInfoOut}, auth=None)
def create_payment_info(request: HttpRequest, payload: PaymentInfoIn):
    require_permission(request, Permissions.LEDGER_MANAGE)
    try:
        return 201, payment_service.create_payment_info(payload.dict())
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@payment_info_router.put("/{info_id}", response=PaymentInfoOut, auth=None)
def update_payment_info(request: HttpRequest, info_id: UUID, payload: PaymentInfoUpdateIn):
    require_permission(request, Permissions.LEDGER_MANAGE)
    info = payment_service.update_payment_info(info_id, payload.dict(exclude_unset=True))
    if not info:
        raise HttpError(404, "Payment info not found")
    return info


@payment_info_router.delete("/{info_id}", response={204: None}, auth=None)
def delete_payment_info(request: HttpRequest, info_id: UUID):
    require_permission(request, Permissions.LEDGER_MANAGE)
    if not payment_service.delete_payment_info(info_id):
        raise HttpError(404, "Payment info not found")
    return 204, None
