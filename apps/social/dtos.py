"""DTOs for Social app."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from apps.identity.dtos import UserSummaryDTO


@dataclass(frozen=True)
class PostDTO:
    id: UUID
    user_id: UUID
    creator_id: Optional[UUID]
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
    author: Optional[UserSummaryDTO] = None


@dataclass(frozen=True)
class CommentDTO:
    id: UUID
    post_id: UUID
    user_id: UUID
    parent_id: Optional[UUID]
    content: str
    like_count: int
    reply_count: int
    is_edited: bool
    edited_at: Optional[datetime]
    created_at: datetime
    author: Optional[UserSummaryDTO] = None
    replies: List['CommentDTO'] = field(default_factory=list)


@dataclass(frozen=True)
class ReactionDTO:
    id: UUID
    user_id: UUID
    target_type: str
    target_id: UUID
    reaction_type: str
    created_at: datetime
    user: Optional[UserSummaryDTO] = None


@dataclass(frozen=True)
class ReactionToggleDTO:
    """Result of a reaction toggle. reaction is None when it was removed."""
    action: str  # 'added', 'removed' or 'updated'
    reaction: Optional[ReactionDTO]
    like_count: int


@dataclass(frozen=True)
class ReactionSummaryDTO:
    reactions: List[ReactionDTO]
    counts: Dict[str, int]
    total: int


@dataclass(frozen=True)
class StoryDTO:
    id: UUID
    user_id: UUID
    content: str
    media_type: str
    media_url: str
    view_count: int
    expires_at: datetime
    created_at: datetime
    viewed: bool = False


@dataclass(frozen=True)
class StoryGroupDTO:
    user: UserSummaryDTO
    stories: List[StoryDTO]


@dataclass(frozen=True)
class StoryViewerDTO:
    viewer: UserSummaryDTO
    viewed_at: datetime
