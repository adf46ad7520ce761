"""DTOs for Search app. Scores are kept as floats until the response is built."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from apps.identity.dtos import UserSummaryDTO


@dataclass(frozen=True)
class UserHitDTO:
    id: UUID
    username: str
    display_name: str
    avatar: str
    is_online: bool
    score: float
    type: str = 'user'


@dataclass(frozen=True)
class CreatorHitDTO:
    id: UUID
    stage_name: str
    display_name: str
    bio: str
    bio_thumbnail: str
    rating: Decimal
    total_ratings: int
    is_verified: bool
    is_live: bool
    tags: List[str]
    user: Optional[UserSummaryDTO]
    score: float
    type: str = 'creator'


@dataclass(frozen=True)
class PostCreatorDTO:
    id: UUID
    stage_name: str
    is_verified: bool


@dataclass(frozen=True)
class PostHitDTO:
    id: UUID
    display_name: str
    media_type: str
    thumbnail_url: str
    like_count: int
    comment_count: int
    view_count: int
    tags: List[str]
    user: Optional[UserSummaryDTO]
    creator: Optional[PostCreatorDTO]
    created_at: datetime
    score: float
    type: str = 'post'
