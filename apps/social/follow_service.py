"""Follow relationships between users. Following a creator follows its owner."""
import logging
from typing import List, Tuple
from uuid import UUID

from django.db import IntegrityError, transaction

from apps.core.exceptions import NotFoundError
from apps.core.pagination import PageMeta, paginate
from apps.creators.services import get_creator_dto
from apps.identity.dtos import UserSummaryDTO
from apps.identity.services import get_user_summaries, user_exists
from .models import Follow

logger = logging.getLogger(__name__)


def is_following(follower_id, followed_id) -> bool:
    return Follow.objects.filter(follower_id=follower_id, followed_id=followed_id).exists()


def _creator_owner(creator_id) -> UUID:
    creator = get_creator_dto(creator_id)
    if not creator or not user_exists(creator.user_id):
        raise NotFoundError("Creator not found")
    return creator.user_id


def _follow(follower_id, followed_id) -> None:
    if follower_id == followed_id:
        raise ValueError("You cannot follow yourself")
    try:
        with transaction.atomic():
            Follow.objects.create(follower_id=follower_id, followed_id=followed_id)
    except IntegrityError:
        raise ValueError("You are already following this user")
    logger.info(f"User {follower_id} followed {followed_id}")


def follow_creator(follower_id, creator_id) -> None:
    owner_id = _creator_owner(creator_id)
    if follower_id == owner_id:
        raise ValueError("You cannot follow yourself")
    if is_following(follower_id, owner_id):
        raise ValueError("You are already following this creator")
    _follow(follower_id, owner_id)


def unfollow_creator(follower_id, creator_id) -> None:
    owner_id = _creator_owner(creator_id)
    deleted, _ = Follow.objects.filter(follower_id=follower_id, followed_id=owner_id).delete()
    if not deleted:
        raise ValueError("You are not following this creator")
    logger.info(f"User {follower_id} unfollowed creator {creator_id}")


def toggle_user_follow(follower_id, user_id) -> bool:
    """Follow or unfollow any user. Returns the new following state."""
    if not user_exists(user_id):
        raise NotFoundError("User not found")
    if follower_id == user_id:
        raise ValueError("You cannot follow yourself")
    deleted, _ = Follow.objects.filter(follower_id=follower_id, followed_id=user_id).delete()
    if deleted:
        logger.info(f"User {follower_id} unfollowed {user_id}")
        return False
    _follow(follower_id, user_id)
    return True


def remove_follower(user_id, follower_id) -> None:
    if user_id == follower_id:
        raise ValueError("You cannot remove yourself")
    deleted, _ = Follow.objects.filter(follower_id=follower_id, followed_id=user_id).delete()
    if not deleted:
        raise ValueError("This user is not following you")
    logger.info(f"User {user_id} removed follower {follower_id}")


def _page_of_users(qs, id_field: str, page: int, limit: int) -> Tuple[List[UserSummaryDTO], PageMeta]:
    rows, meta = paginate(qs.order_by('-created_at'), page, limit)
    ids = [getattr(f, id_field) for f in rows]
    users = get_user_summaries(ids)
    return [users[i] for i in ids if i in users], meta


def list_followers(user_id, page: int = 1, limit: int = 20) -> Tuple[List[UserSummaryDTO], PageMeta]:
    if not user_exists(user_id, active_only=False):
        raise NotFoundError("User not found")
    return _page_of_users(Follow.objects.filter(followed_id=user_id), 'follower_id', page, limit)


def list_following(user_id, page: int = 1, limit: int = 20) -> Tuple[List[UserSummaryDTO], PageMeta]:
    if not user_exists(user_id, active_only=False):
        raise NotFoundError("User not found")
    return _page_of_users(Follow.objects.filter(follower_id=user_id), 'followed_id', page, limit)
