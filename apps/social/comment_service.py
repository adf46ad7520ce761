"""Comments and replies on posts."""
import logging
from typing import List, Optional, Tuple

from django.db import transaction
from django.db.models import F
from django.db.models.functions import Greatest
from django.utils import timezone

from apps.core.exceptions import ForbiddenError, NotFoundError
from apps.core.pagination import PageMeta, paginate
from apps.identity.services import get_user_summaries
from .models import Comment, Post, Reaction, ReactionTarget
from .dtos import CommentDTO
from .post_service import ensure_visible, get_post

logger = logging.getLogger(__name__)

SORT_FIELDS = ('created_at', 'like_count')
LIST_REPLY_PREVIEW = 3
DETAIL_REPLY_PREVIEW = 5


def _to_dto(comment: Comment, authors: dict, replies: Optional[List[CommentDTO]] = None) -> CommentDTO:
    return CommentDTO(
        id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        parent_id=comment.parent_id,
        content=comment.content,
        like_count=comment.like_count,
        reply_count=comment.reply_count,
        is_edited=comment.is_edited,
        edited_at=comment.edited_at,
        created_at=comment.created_at,
        author=authors.get(comment.user_id),
        replies=replies or [],
    )


def _build(comments: List[Comment], reply_preview: int) -> List[CommentDTO]:
    """Attach the oldest `reply_preview` replies and the authors to each comment."""
    previews = {}
    for comment in comments:
        if reply_preview and comment.reply_count:
            previews[comment.id] = list(
                Comment.objects.filter(parent_id=comment.id).order_by('created_at')[:reply_preview]
            )
    user_ids = {c.user_id for c in comments}
    for replies in previews.values():
        user_ids.update(r.user_id for r in replies)
    authors = get_user_summaries(user_ids)

    result = []
    for comment in comments:
        replies = [_to_dto(r, authors) for r in previews.get(comment.id, [])]
        result.append(_to_dto(comment, authors, replies))
    return result


def _get_comment(comment_id) -> Comment:
    try:
        return Comment.objects.get(id=comment_id)
    except Comment.DoesNotExist:
        raise NotFoundError("Comment not found")


def _visible_post(post_id, user_id) -> Post:
    post = get_post(post_id)
    if not post:
        raise NotFoundError("Post not found")
    ensure_visible(post, user_id)
    return post


def _content(value: str) -> str:
    content = (value or '').strip()
    if not content:
        raise ValueError("Comment content cannot be empty")
    return content


def create_comment(post_id, user_id, content: str) -> CommentDTO:
    post = get_post(post_id)
    if not post:
        raise NotFoundError("Post not found")
    if not post.is_public and post.user_id != user_id:
        raise ForbiddenError("Cannot comment on a private post")

    with transaction.atomic():
        comment = Comment.objects.create(post_id=post.id, user_id=user_id, content=_content(content))
        Post.objects.filter(id=post.id).update(comment_count=F('comment_count') + 1)

    logger.info(f"Comment {comment.id} created by user {user_id} on post {post.id}")
    return _build([comment], 0)[0]


def list_post_comments(
    post_id,
    user_id=None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = 'created_at',
    order: str = 'desc',
) -> Tuple[List[CommentDTO], PageMeta]:
    """Root comments of a post, each with a preview of its first replies."""
    post = _visible_post(post_id, user_id)
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"sort_by must be one of: {', '.join(SORT_FIELDS)}")
    ordering = sort_by if (order or '').lower() == 'asc' else f'-{sort_by}'

    qs = Comment.objects.filter(post_id=post.id, parent_id__isnull=True).order_by(ordering, '-id')
    rows, meta = paginate(qs, page, limit)
    return _build(rows, LIST_REPLY_PREVIEW), meta


def get_comment(comment_id, user_id=None) -> CommentDTO:
    comment = _get_comment(comment_id)
    _visible_post(comment.post_id, user_id)
    return _build([comment], DETAIL_REPLY_PREVIEW)[0]


def update_comment(comment_id, user_id, content: str, as_admin: bool = False) -> CommentDTO:
    comment = _get_comment(comment_id)
    if comment.user_id != user_id and not as_admin:
        raise ForbiddenError("Not authorized to update this comment")

    comment.content = _content(content)
    comment.is_edited = True
    comment.edited_at = timezone.now()
    comment.save(update_fields=['content', 'is_edited', 'edited_at', 'updated_at'])
    logger.info(f"Comment {comment.id} updated by user {user_id}")
    return _build([comment], 0)[0]


def delete_comment(comment_id, user_id, as_admin: bool = False) -> int:
    """
    Delete a comment together with every reply below it.

    Returns the number of removed comments.
    """
    comment = _get_comment(comment_id)
    if comment.user_id != user_id and not as_admin:
        raise ForbiddenError("Not authorized to delete this comment")

    ids = [comment.id]
    frontier = [comment.id]
    while frontier:
        frontier = list(Comment.objects.filter(parent_id__in=frontier).values_list('id', flat=True))
        ids.extend(frontier)

    with transaction.atomic():
        Reaction.objects.filter(target_type=ReactionTarget.COMMENT, target_id__in=ids).delete()
        removed, _ = Comment.objects.filter(id__in=ids).delete()
        Post.objects.filter(id=comment.post_id).update(
            comment_count=Greatest(F('comment_count') - removed, 0)
        )
        if comment.parent_id:
            Comment.objects.filter(id=comment.parent_id).update(
                reply_count=Greatest(F('reply_count') - 1, 0)
            )

    logger.info(f"Comment {comment.id} and {removed - 1} replies deleted by user {user_id}")
    return removed


def list_replies(comment_id, user_id=None, page: int = 1, limit: int = 10) -> Tuple[List[CommentDTO], PageMeta]:
    parent = _get_comment(comment_id)
    _visible_post(parent.post_id, user_id)
    rows, meta = paginate(Comment.objects.filter(parent_id=parent.id).order_by('created_at'), page, limit)
    return _build(rows, 0), meta


def create_reply(comment_id, user_id, content: str) -> CommentDTO:
    parent = _get_comment(comment_id)
    post = get_post(parent.post_id)
    if not post:
        raise NotFoundError("Post not found")
    if not post.is_public and post.user_id != user_id:
        raise ForbiddenError("Cannot comment on a private post")

    with transaction.atomic():
        reply = Comment.objects.create(
            post_id=post.id,
            user_id=user_id,
            parent_id=parent.id,
            content=_content(content),
        )
        Comment.objects.filter(id=parent.id).update(reply_count=F('reply_count') + 1)
        Post.objects.filter(id=post.id).update(comment_count=F('comment_count') + 1)

    logger.info(f"Reply {reply.id} created by user {user_id} on comment {parent.id}")
    return _build([reply], 0)[0]
