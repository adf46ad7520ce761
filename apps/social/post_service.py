"""Posts: the content comments, reactions and search hang off."""
import logging
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from django.db import transaction
from django.db.models import F

from apps.core.exceptions import ForbiddenError, NotFoundError
from apps.core.pagination import PageMeta, paginate
from apps.creators.services import get_creator_by_user
from apps.identity.services import get_user_summaries
from .models import Comment, Post, PostMediaType, PostStatus, Reaction, ReactionTarget
from .dtos import PostDTO

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('content', 'media_type', 'media_urls', 'thumbnail_url',
                   'is_public', 'status', 'tags', 'location')


def to_dto(post: Post, author=None) -> PostDTO:
    return PostDTO(
        id=post.id,
        user_id=post.user_id,
        creator_id=post.creator_id,
        content=post.content,
        media_type=post.media_type,
        media_urls=list(post.media_urls or []),
        thumbnail_url=post.thumbnail_url,
        is_public=post.is_public,
        status=post.status,
        tags=list(post.tags or []),
        location=post.location,
        view_count=post.view_count,
        like_count=post.like_count,
        comment_count=post.comment_count,
        share_count=post.share_count,
        created_at=post.created_at,
        updated_at=post.updated_at,
        author=author,
    )


def _with_authors(posts: Iterable[Post]) -> List[PostDTO]:
    posts = list(posts)
    authors = get_user_summaries(p.user_id for p in posts)
    return [to_dto(p, authors.get(p.user_id)) for p in posts]


def _validate(data: dict) -> None:
    if data.get('media_type') is not None and data['media_type'] not in PostMediaType.values:
        raise ValueError(f"Invalid media_type: {data['media_type']}")
    if data.get('status') is not None and data['status'] not in PostStatus.values:
        raise ValueError(f"Invalid status: {data['status']}")


def get_post(post_id) -> Optional[Post]:
    """Raw post row, used by the comment and reaction services."""
    try:
        return Post.objects.get(id=post_id)
    except Post.DoesNotExist:
        return None


def ensure_visible(post: Post, user_id) -> None:
    if not post.is_public and post.user_id != user_id:
        raise ForbiddenError("This post is private")


def create_post(user_id, data: dict) -> PostDTO:
    data = {k: v for k, v in data.items() if k in EDITABLE_FIELDS and v is not None}
    _validate(data)
    if not (data.get('content') or '').strip() and not data.get('media_urls'):
        raise ValueError("A post needs content or media")

    creator = get_creator_by_user(user_id)
    post = Post.objects.create(
        user_id=user_id,
        creator_id=creator.id if creator else None,
        **data,
    )
    logger.info(f"Post {post.id} created by user {user_id}")
    return _with_authors([post])[0]


def list_posts(user_id: Optional[UUID] = None, page: int = 1, limit: int = 10) -> Tuple[List[PostDTO], PageMeta]:
    """Published public posts, newest first."""
    qs = Post.objects.filter(status=PostStatus.PUBLISHED, is_public=True)
    if user_id:
        qs = qs.filter(user_id=user_id)
    rows, meta = paginate(qs.order_by('-created_at'), page, limit)
    return _with_authors(rows), meta


def view_post(post_id, viewer_id=None) -> PostDTO:
    post = get_post(post_id)
    if not post or post.status == PostStatus.DELETED:
        raise NotFoundError("Post not found")
    ensure_visible(post, viewer_id)
    Post.objects.filter(id=post.id).update(view_count=F('view_count') + 1)
    post.refresh_from_db()
    return _with_authors([post])[0]


def update_post(post_id, user_id, data: dict) -> PostDTO:
    post = get_post(post_id)
    if not post:
        raise NotFoundError("Post not found")
    if post.user_id != user_id:
        raise ForbiddenError("You can only edit your own posts")
    _validate(data)
    for key in EDITABLE_FIELDS:
        if data.get(key) is not None:
            setattr(post, key, data[key])
    post.save()
    return _with_authors([post])[0]


def delete_post(post_id, user_id, as_admin: bool = False) -> None:
    post = get_post(post_id)
    if not post:
        raise NotFoundError("Post not found")
    if post.user_id != user_id and not as_admin:
        raise ForbiddenError("You can only delete your own posts")
    comment_ids = list(Comment.objects.filter(post_id=post.id).values_list('id', flat=True))
    with transaction.atomic():
        Reaction.objects.filter(target_type=ReactionTarget.COMMENT, target_id__in=comment_ids).delete()
        Reaction.objects.filter(target_type=ReactionTarget.POST, target_id=post.id).delete()
        Comment.objects.filter(post_id=post.id).delete()
        post.delete()
    logger.info(f"Post {post_id} deleted by user {user_id}")

