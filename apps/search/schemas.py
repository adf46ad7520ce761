"""API Schemas for Search app."""
from typing import List, Optional
from uuid import UUID
from decimal import Decimal
from datetime import datetime
from ninja import Schema

from apps.identity.schemas import UserSummaryOut


class UserHitOut(Schema):
    id: UUID
    type: str
    username: str
    display_name: str
    avatar: str
    is_online: bool
    relevance_score: int


class CreatorHitOut(Schema):
    id: UUID
    type: str
    stage_name: str
    display_name: str
    bio: str
    bio_thumbnail: str
    rating: Decimal
    total_ratings: int
    is_verified: bool
    is_live: bool
    tags: List[str]
    user: Optional[UserSummaryOut] = None
    relevance_score: int


class PostCreatorOut(Schema):
    id: UUID
    stage_name: str
    is_verified: bool


class PostHitOut(Schema):
    id: UUID
    type: str
    content: str
    media_type: str
    thumbnail_url: str
    like_count: int
    comment_count: int
    view_count: int
    tags: List[str]
    user: Optional[UserSummaryOut] = None
    creator: Optional[PostCreatorOut] = None
    created_at: datetime
    relevance_score: int


class SearchResultsOut(Schema):
    users: List[UserHitOut]
    creators: List[CreatorHitOut]
    posts: List[PostHitOut]


class TopResultOut(Schema):
    id: UUID
    type: str
    display_name: str
    relevance_score: int


class BestMatchOut(Schema):
    type: str
    display_name: str
    score: int


class SuggestionsOut(Schema):
    has_users: bool
    has_creators: bool
    has_posts: bool
    best_match: Optional[BestMatchOut] = None


class SearchOut(Schema):
    query: str
    total_results: int
    results: SearchResultsOut
    top_results: List[TopResultOut]
    suggestions: SuggestionsOut
