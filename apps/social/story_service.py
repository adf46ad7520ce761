"""
Stories: 24-hour media posts.

Media files go through Django's default storage (local media folder or S3,
see config/storage.py).
"""
import logging
import os
import uuid
from datetime import timedelta
from typing import List

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.core.exceptions import ForbiddenError, NotFoundError
from apps.identity.services import get_user_summaries
from .models import Follow, Story, StoryMediaType, StoryView
from .dtos import StoryDTO, StoryGroupDTO, StoryViewerDTO

logger = logging.getLogger(__name__)

STORY_LIFETIME = timedelta(hours=24)


def _to_dto(story: Story, viewed: bool = False) -> StoryDTO:
    return StoryDTO(
        id=story.id,
        user_id=story.user_id,
        content=story.content,
        media_type=story.media_type,
        media_url=story.media_url,
        view_count=story.view_count,
        expires_at=story.expires_at,
        created_at=story.created_at,
        viewed=viewed,
    )


def _live_stories():
    return Story.objects.filter(is_active=True, expires_at__gt=timezone.now())


def _get_story(story_id) -> Story:
    try:
        return Story.objects.get(id=story_id)
    except Story.DoesNotExist:
        raise NotFoundError("Story not found")


def create_story(user_id, media, media_type: str = StoryMediaType.IMAGE, content: str = "") -> StoryDTO:
    """Store the uploaded media file and create a story that expires in 24 hours."""
    if media is None:
        raise ValueError("Media file is required to create a story.")
    media_type = (media_type or StoryMediaType.IMAGE).upper()
    if media_type not in StoryMediaType.values:
        raise ValueError(f"Invalid media_type: {media_type}")
    if media.size and media.size > settings.STORY_MAX_UPLOAD_BYTES:
        raise ValueError("Media file is too large.")

    _, ext = os.path.splitext(media.name or '')
    path = default_storage.save(f"stories/{user_id}/{uuid.uuid4().hex}{ext.lower()}", media)
    story = Story.objects.create(
        user_id=user_id,
        content=content or "",
        media_type=media_type,
        media_path=path,
        media_url=default_storage.url(path),
        expires_at=timezone.now() + STORY_LIFETIME,
    )
    logger.info(f"Story {story.id} created by user {user_id} ({media_type}, {path})")
    return _to_dto(story)


def story_feed(user_id) -> List[StoryGroupDTO]:
    """
    Unexpired stories of the caller and everyone they follow, grouped by author.

    Groups are ordered by author id, stories oldest first.
    """
    followed = Follow.objects.filter(follower_id=user_id).values_list('followed_id', flat=True)
    author_ids = {user_id, *followed}
    stories = list(_live_stories().filter(user_id__in=author_ids).order_by('user_id', 'created_at'))

    viewed = set(
        StoryView.objects.filter(viewer_id=user_id, story_id__in=[s.id for s in stories])
        .values_list('story_id', flat=True)
    )
    authors = get_user_summaries(s.user_id for s in stories)

    groups = []
    for story in stories:
        author = authors.get(story.user_id)
        if author is None or not author.is_active:
            continue
        if not groups or groups[-1].user.id != story.user_id:
            groups.append(StoryGroupDTO(user=author, stories=[]))
        groups[-1].stories.append(_to_dto(story, story.id in viewed))
    return groups


def view_story(story_id, viewer_id) -> StoryDTO:
    """Record a view. Repeated views and the author's own views are not counted."""
    try:
        story = _live_stories().get(id=story_id)
    except Story.DoesNotExist:
        raise NotFoundError("Story not found")

    if story.user_id != viewer_id:
        try:
            with transaction.atomic():
                _, created = StoryView.objects.get_or_create(story_id=story.id, viewer_id=viewer_id)
                if created:
                    Story.objects.filter(id=story.id).update(view_count=F('view_count') + 1)
        except IntegrityError:
            logger.debug(f"Concurrent view of story {story.id} by {viewer_id}")
        story.refresh_from_db()
    return _to_dto(story, viewed=True)


def list_viewers(story_id, user_id) -> List[StoryViewerDTO]:
    story = _get_story(story_id)
    if story.user_id != user_id:
        raise ForbiddenError("Only the author can see who viewed a story")
    views = list(StoryView.objects.filter(story_id=story.id).order_by('-viewed_at'))
    viewers = get_user_summaries(v.viewer_id for v in views)
    return [
        StoryViewerDTO(viewer=viewers[v.viewer_id], viewed_at=v.viewed_at)
        for v in views if v.viewer_id in viewers
    ]


def delete_story(story_id, user_id) -> None:
    story = _get_story(story_id)
    if story.user_id != user_id:
        raise ForbiddenError("You can only delete your own stories")
    path = story.media_path
    with transaction.atomic():
        StoryView.objects.filter(story_id=story.id).delete()
        story.delete()
    if path:
        default_storage.delete(path)
    logger.info(f"Story {story_id} deleted by user {user_id}")


def deactivate_expired() -> int:
    """Flag stories past their lifetime as inactive. Returns the number updated."""
    count = Story.objects.filter(is_active=True, expires_at__lte=timezone.now()).update(is_active=False)
    if count:
        logger.info(f"Deactivated {count} expired stories")
    return count
