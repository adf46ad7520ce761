"""DTOs for Ledger app - Data Transfer Objects for cross-app communication."""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID
from decimal import Decimal
from datetime import datetime


@dataclass(frozen=True)
class WalletDTO:
    id: UUID
    user_id: UUID
    balance: Decimal
    tokens: int
    frozen_balance: Decimal
    frozen_tokens: int
    total_deposited: Decimal
    total_withdrawn: Decimal
    updated_at: datetime


@dataclass(frozen=True)
class WalletTransactionDTO:
    id: UUID
    transaction_type: str
    amount: Decimal
    tokens: int
    balance_after: Decimal
    tokens_after: int
    status: str
    description: str
    related_user_id: Optional[UUID]
    related_request_id: Optional[UUID]
    created_at: datetime


@dataclass(frozen=True)
class TransferResultDTO:
    """Outcome of a wallet-to-wallet transfer, seen from the sender."""
    payment_id: UUID
    sender_id: UUID
    recipient_id: UUID
    amount: Decimal
    new_balance: Decimal


@dataclass(frozen=True)
class TokenMoveDTO:
    sender_tokens: int
    recipient_tokens: int
    tokens: int


@dataclass(frozen=True)
class WithdrawalRequestDTO:
    id: UUID
    user_id: UUID
    amount: Decimal
    bank_detail: dict
    status: str
    admin_note: str
    processed_by_id: Optional[UUID]
    processed_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class PaymentTransactionDTO:
    id: UUID
    from_user_id: UUID
    to_user_id: Optional[UUID]
    payment_info_id: Optional[UUID]
    transaction_type: str
    amount: Decimal
    token_amount: int
    currency: str
    status: str
    payment_method: str
    reference_id: str
    description: str
    metadata: dict
    processed_by_id: Optional[UUID]
    processed_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class PaymentSummaryRowDTO:
    transaction_type: str
    status: str
    count: int
    total_amount: Decimal


@dataclass(frozen=True)
class DepositRequestDTO:
    id: UUID
    user_id: UUID
    payment_info_id: Optional[UUID]
    amount: Decimal
    code_pay: str
    status: str
    metadata: dict
    processed_by_id: Optional[UUID]
    processed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class PaymentInfoDTO:
    id: UUID
    bank_name: str
    account_number: str
    account_name: str
    branch: str
    qr_code_url: str
    note: str
    is_active: bool
    created_at: datetime
