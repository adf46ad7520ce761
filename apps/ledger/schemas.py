"""
API Schemas for Ledger app.
Pydantic/Ninja schemas for request/response validation.
"""
from typing import Optional, List
from uuid import UUID
from decimal import Decimal
from datetime import datetime
from ninja import Schema

from apps.core.pagination import PageMetaOut


# =============================================================================
# Request Schemas
# =============================================================================

class TransferIn(Schema):
    recipient_id: UUID
    amount: Decimal
    description: str = ""


class WithdrawalIn(Schema):
    amount: Decimal
    bank_detail: dict = {}


class WithdrawalProcessIn(Schema):
    status: str  # 'COMPLETED' or 'REJECTED'
    admin_note: str = ""


class DepositIn(Schema):
    amount: Decimal
    code_pay: str
    payment_info_id: Optional[UUID] = None
    payment_method: str = "BANK_TRANSFER"
    description: str = ""


class WithdrawIn(Schema):
    amount: Decimal
    payment_method: str = "BANK_TRANSFER"
    bank_info: dict = {}
    description: str = ""


class PaymentStatusIn(Schema):
    status: str
    note: str = ""


class DepositRequestIn(Schema):
    amount: Decimal
    code_pay: str
    payment_info_id: Optional[UUID] = None
    metadata: dict = {}


class DepositRequestStatusIn(Schema):
    status: str  # 'COMPLETED' or 'FAILED'


class PaymentInfoIn(Schema):
    bank_name: str
    account_number: str
    account_name: str
    branch: str = ""
    qr_code_url: str = ""
    note: str = ""
    is_active: bool = True


class PaymentInfoUpdateIn(Schema):
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    branch: Optional[str] = None
    qr_code_url: Optional[str] = None
    note: Optional[str] = None
    is_active: Optional[bool] = None


# =============================================================================
# Response Schemas
# =============================================================================

class WalletOut(Schema):
    id: UUID
    user_id: UUID
    balance: Decimal
    tokens: int
    frozen_balance: Decimal
    frozen_tokens: int
    total_deposited: Decimal
    total_withdrawn: Decimal
    updated_at: datetime


class WalletTransactionOut(Schema):
    id: UUID
    transaction_type: str
    amount: Decimal
    tokens: int
    balance_after: Decimal
    tokens_after: int
    status: str
    description: str
    related_user_id: Optional[UUID] = None
    related_request_id: Optional[UUID] = None
    created_at: datetime


class WalletHistoryOut(Schema):
    items: List[WalletTransactionOut]
    pagination: PageMetaOut


class TransferOut(Schema):
    message: str
    payment_id: UUID
    amount: Decimal
    new_balance: Decimal


class WithdrawalRequestOut(Schema):
    id: UUID
    user_id: UUID
    amount: Decimal
    bank_detail: dict
    status: str
    admin_note: str
    processed_by_id: Optional[UUID] = None
    processed_at: Optional[datetime] = None
    created_at: datetime


class WithdrawalCreatedOut(Schema):
    message: str
    request: WithdrawalRequestOut
    new_balance: Decimal


class WithdrawalPageOut(Schema):
    items: List[WithdrawalRequestOut]
    pagination: PageMetaOut


class PaymentTransactionOut(Schema):
    id: UUID
    from_user_id: UUID
    to_user_id: Optional[UUID] = None
    payment_info_id: Optional[UUID] = None
    transaction_type: str
    amount: Decimal
    token_amount: int
    currency: str
    status: str
    payment_method: str
    reference_id: str
    description: str
    metadata: dict
    processed_by_id: Optional[UUID] = None
    processed_at: Optional[datetime] = None
    created_at: datetime


class PaymentPageOut(Schema):
    items: List[PaymentTransactionOut]
    pagination: PageMetaOut


class PaymentSummaryRowOut(Schema):
    transaction_type: str
    status: str
    count: int
    total_amount: Decimal


class DepositRequestOut(Schema):
    id: UUID
    user_id: UUID
    payment_info_id: Optional[UUID] = None
    amount: Decimal
    code_pay: str
    status: str
    metadata: dict
    processed_by_id: Optional[UUID] = None
    processed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class DepositRequestPageOut(Schema):
    items: List[DepositRequestOut]
    pagination: PageMetaOut


class PaymentInfoOut(Schema):
    id: UUID
    bank_name: str
    account_number: str
    account_name: str
    branch: str
    qr_code_url: str
    note: str
    is_active: bool
    created_at: datetime


class PaymentInfoPageOut(Schema):
    items: List[PaymentInfoOut]
    pagination: PageMetaOut
