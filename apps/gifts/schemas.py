"""API Schemas for Gifts app."""
from typing import List, Optional
from uuid import UUID
from datetime import datetime
from ninja import Schema

from apps.core.pagination import PageMetaOut
from apps.identity.schemas import UserSummaryOut


class GiftIn(Schema):
    name: str
    description: str = ""
    image_url: str = ""
    animation_url: str = ""
    price: int
    category: str = ""
    rarity: str = "COMMON"


class GiftUpdateIn(Schema):
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    animation_url: Optional[str] = None
    price: Optional[int] = None
    category: Optional[str] = None
    rarity: Optional[str] = None
    is_active: Optional[bool] = None


class SendGiftIn(Schema):
    recipient_id: UUID
    quantity: int = 1
    message: str = ""
    is_anonymous: bool = False


class GiftOut(Schema):
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


class GiftPageOut(Schema):
    items: List[GiftOut]
    pagination: PageMetaOut


class GiftTransactionOut(Schema):
    id: UUID
    sender_id: Optional[UUID] = None
    recipient_id: UUID
    gift_id: UUID
    quantity: int
    total_tokens: int
    message: str
    is_anonymous: bool
    created_at: datetime
    gift: Optional[GiftOut] = None
    sender: Optional[UserSummaryOut] = None
    recipient: Optional[UserSummaryOut] = None


class GiftTransactionPageOut(Schema):
    items: List[GiftTransactionOut]
    pagination: PageMetaOut


class GiftSentOut(Schema):
    transaction: GiftTransactionOut
    remaining_tokens: int
