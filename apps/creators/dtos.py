"""DTOs for Creators app."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List
from uuid import UUID


@dataclass(frozen=True)
class CreatorDTO:
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
