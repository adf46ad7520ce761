"""API Schemas for Subscriptions app."""
from typing import List, Optional
from uuid import UUID
from decimal import Decimal
from datetime import datetime
from ninja import Schema

from apps.core.pagination import PageMetaOut


class StreamPackageIn(Schema):
    name: str
    description: str = ""
    duration: int
    price: Decimal
    features: List[str] = []
    max_concurrent_streams: int = 1
    max_stream_duration: Optional[int] = None
    priority_support: bool = False
    is_active: bool = True


class StreamPackageUpdateIn(Schema):
    name: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    price: Optional[Decimal] = None
    features: Optional[List[str]] = None
    max_concurrent_streams: Optional[int] = None
    max_stream_duration: Optional[int] = None
    priority_support: Optional[bool] = None
    is_active: Optional[bool] = None


class SubscribeIn(Schema):
    package_id: UUID


class StreamPackageOut(Schema):
    id: UUID
    name: str
    description: str
    duration: int
    price: Decimal
    features: List[str]
    max_concurrent_streams: int
    max_stream_duration: Optional[int] = None
    priority_support: bool
    is_active: bool
    created_at: datetime


class StreamPackagePageOut(Schema):
    items: List[StreamPackageOut]
    pagination: PageMetaOut


class SubscriptionOut(Schema):
    id: UUID
    creator_id: UUID
    package_id: UUID
    start_date: datetime
    end_date: datetime
    price: Decimal
    status: str
    auto_renew: bool
    created_at: datetime
    package: Optional[StreamPackageOut] = None


class SubscriptionPageOut(Schema):
    items: List[SubscriptionOut]
    pagination: PageMetaOut
