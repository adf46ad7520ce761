"""DTOs for Gifts app."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from apps.identity.dtos import UserSummaryDTO


@dataclass(frozen=True)
class GiftDTO:
    id: UUID
    name: str
    description: str
    image_url: str
    animation_url: str
    price: int
    category: str
    rarity: str
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class GiftTransactionDTO:
    id: UUID
    sender_id: Optional[UUID]
    recipient_id: UUID
    gift_id: UUID
    quantity: int
    total_tokens: int
    message: str
    is_anonymous: bool
    created_at: datetime
    gift: Optional[GiftDTO] = None
    sender: Optional[UserSummaryDTO] = None
    recipient: Optional[UserSummaryDTO] = None


@dataclass(frozen=True)
class GiftSentDTO:
    transaction: GiftTransactionDTO
    remaining_tokens: int
