"""API Schemas for Creators app."""
from typing import Optional, List
from uuid import UUID
from decimal import Decimal
from datetime import datetime
from ninja import Schema

from apps.core.pagination import PageMetaOut


class CreatorIn(Schema):
    stage_name: str
    title_bio: str = ""
    bio: str = ""
    bio_thumbnail: str = ""
    service: str = ""
    tags: List[str] = []
    specialties: List[str] = []
    subscription_price: Decimal = Decimal('0')


class CreatorUpdateIn(Schema):
    stage_name: Optional[str] = None
    title_bio: Optional[str] = None
    bio: Optional[str] = None
    bio_thumbnail: Optional[str] = None
    service: Optional[str] = None
    tags: Optional[List[str]] = None
    specialties: Optional[List[str]] = None
    subscription_price: Optional[Decimal] = None


class LiveIn(Schema):
    is_live: bool


class VerifyIn(Schema):
    is_verified: bool


class CreatorOut(Schema):
    id: UUID
    user_id: UUID
    stage_name: str
    title_bio: str
    bio: str
    bio_thumbnail: str
    service: str
    tags: List[str]
    specialties: List[str]
    rating: Decimal
    total_ratings: int
    is_verified: bool
    is_live: bool
    subscription_price: Decimal
    created_at: datetime


class CreatorPageOut(Schema):
    items: List[CreatorOut]
    pagination: PageMetaOut
