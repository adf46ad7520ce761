"""API Schemas for Social app."""
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime
from ninja import Schema

from apps.core.pagination import PageMetaOut
from apps.identity.schemas import UserSummaryOut


# =============================================================================
# Request Schemas
# =============================================================================

class PostIn(Schema):
    content: str = ""
    media_type: str = "TEXT"
    media_urls: List[str] = []
    thumbnail_url: str = ""
    is_public: bool = True
    status: str = "PUBLISHED"
    tags: List[str] = []
    location: str = ""


class PostUpdateIn(Schema):
    content: Optional[str] = None
    media_type: Optional[str] = None
    media_urls: Optional[List[str]] = None
    thumbnail_url: Optional[str] = None
    is_public: Optional[bool] = None
    status: Optional[str] = None
    tags: Optional[List[str]] = None
    location: Optional[str] = None


class CommentIn(Schema):
    content: str


class ReactionIn(Schema):
    post_id: Optional[UUID] = None
    comment_id: Optional[UUID] = None
    reaction_type: str = "LIKE"


class FollowIn(Schema):
    creator_id: UUID


# =============================================================================
# Response Schemas
# =============================================================================

class PostOut(Schema):
    id: UUID
    user_id: UUID
    creator_id: Optional[UUID] = None
    content: str
    media_type: str
    media_urls: List[str]
    thumbnail_url: str
    is_public: bool
    status: str
    tags: List[str]
    location: str
    view_count: int
    like_count: int
    comment_count: int
    share_count: int
    created_at: datetime
    updated_at: datetime
    author: Optional[UserSummaryOut] = None


class PostPageOut(Schema):
    items: List[PostOut]
    pagination: PageMetaOut


class ReplyOut(Schema):
    id: UUID
    post_id: UUID
    user_id: UUID
    parent_id: Optional[UUID] = None
    content: str
    like_count: int
    reply_count: int
    is_edited: bool
    edited_at: Optional[datetime] = None
    created_at: datetime
    author: Optional[UserSummaryOut] = None


class CommentOut(ReplyOut):
    replies: List[ReplyOut] = []


class CommentPageOut(Schema):
    items: List[CommentOut]
    pagination: PageMetaOut


class ReactionOut(Schema):
    id: UUID
    user_id: UUID
    target_type: str
    target_id: UUID
    reaction_type: str
    created_at: datetime
    user: Optional[UserSummaryOut] = None


class ReactionToggleOut(Schema):
    action: str
    reaction: Optional[ReactionOut] = None
    like_count: int


class ReactionSummaryOut(Schema):
    reactions: List[ReactionOut]
    counts: Dict[str, int]
    total: int


class StoryOut(Schema):
    id: UUID
    user_id: UUID
    content: str
    media_type: str
    media_url: str
    view_count: int
    expires_at: datetime
    created_at: datetime
    viewed: bool = False


class StoryGroupOut(Schema):
    user: UserSummaryOut
    stories: List[StoryOut]


class StoryViewerOut(Schema):
    viewer: UserSummaryOut
    viewed_at: datetime


class FollowStateOut(Schema):
    is_following: bool


class UserPageOut(Schema):
    items: List[UserSummaryOut]
    pagination: PageMetaOut


class MessageOut(Schema):
    message: str
