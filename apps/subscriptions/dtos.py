"""DTOs for Subscriptions app."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID


@dataclass(frozen=True)
class StreamPackageDTO:
    id: UUID
    name: str
    description: str
    duration: int
    price: Decimal
    features: List[str]
    max_concurrent_streams: int
    max_stream_duration: Optional[int]
    priority_support: bool
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class SubscriptionDTO:
    id: UUID
    creator_id: UUID
    package_id: UUID
    start_date: datetime
    end_date: datetime
    price: Decimal
    status: str
    auto_renew: bool
    created_at: datetime
    package: Optional[StreamPackageDTO] = None
