"""Reactions on posts and comments with toggle semantics."""
import logging
from collections import Counter

from django.db import transaction
from django.db.models import F
from django.db.models.functions import Greatest

from apps.core.exceptions import NotFoundError
from apps.identity.services import get_user_summaries
from .models import Comment, Post, Reaction, ReactionTarget, ReactionType
from .dtos import ReactionDTO, ReactionSummaryDTO, ReactionToggleDTO
from .post_service import ensure_visible, get_post

logger = logging.getLogger(__name__)

ADDED = 'added'
REMOVED = 'removed'
UPDATED = 'updated'


def _to_dto(reaction: Reaction, user=None) -> ReactionDTO:
    return ReactionDTO(
        id=reaction.id,
        user_id=reaction.user_id,
        target_type=reaction.target_type,
        target_id=reaction.target_id,
        reaction_type=reaction.reaction_type,
        created_at=reaction.created_at,
        user=user,
    )


def _target_model(target_type: str):
    return Post if target_type == ReactionTarget.POST else Comment


def _resolve_target(user_id, post_id=None, comment_id=None):
    """Return (target_type, target) for a reaction request."""
    if post_id:
        post = get_post(post_id)
        if not post:
            raise NotFoundError("Post not found")
        ensure_visible(post, user_id)
        return ReactionTarget.POST, post
    if comment_id:
        try:
            return ReactionTarget.COMMENT, Comment.objects.get(id=comment_id)
        except Comment.DoesNotExist:
            raise NotFoundError("Comment not found")
    raise ValueError("Either post_id or comment_id is required")


def toggle_reaction(
    user_id,
    reaction_type: str = ReactionType.LIKE,
    post_id=None,
    comment_id=None,
) -> ReactionToggleDTO:
    """
    Add, switch or remove the caller's reaction on a post or comment.

    Reacting again with the same type removes the reaction; a different type
    replaces it. The target's like_count follows the number of reactions.
    """
    reaction_type = (reaction_type or ReactionType.LIKE).upper()
    if reaction_type not in ReactionType.values:
        raise ValueError(f"Invalid reaction type: {reaction_type}")
    target_type, target = _resolve_target(user_id, post_id, comment_id)
    model = _target_model(target_type)

    with transaction.atomic():
        existing = (
            Reaction.objects.select_for_update()
            .filter(user_id=user_id, target_type=target_type, target_id=target.id)
            .first()
        )
        if existing is None:
            reaction = Reaction.objects.create(
                user_id=user_id,
                target_type=target_type,
                target_id=target.id,
                reaction_type=reaction_type,
            )
            model.objects.filter(id=target.id).update(like_count=F('like_count') + 1)
            action = ADDED
        elif existing.reaction_type == reaction_type:
            existing.delete()
            model.objects.filter(id=target.id).update(like_count=Greatest(F('like_count') - 1, 0))
            reaction = None
            action = REMOVED
        else:
            existing.reaction_type = reaction_type
            existing.save(update_fields=['reaction_type', 'updated_at'])
            reaction = existing
            action = UPDATED

    like_count = model.objects.values_list('like_count', flat=True).get(id=target.id)
    logger.info(f"Reaction {action} by user {user_id} on {target_type} {target.id}")
    return ReactionToggleDTO(
        action=action,
        reaction=_to_dto(reaction) if reaction else None,
        like_count=like_count,
    )


def summarize(target_type: str, target_id, user_id=None) -> ReactionSummaryDTO:
    """All reactions on a target with counts per type."""
    if target_type == ReactionTarget.POST:
        post = get_post(target_id)
        if not post:
            raise NotFoundError("Post not found")
        ensure_visible(post, user_id)
    elif not Comment.objects.filter(id=target_id).exists():
        raise NotFoundError("Comment not found")

    reactions = list(Reaction.objects.filter(target_type=target_type, target_id=target_id))
    users = get_user_summaries(r.user_id for r in reactions)
    counts = Counter(r.reaction_type for r in reactions)
    return ReactionSummaryDTO(
        reactions=[_to_dto(r, users.get(r.user_id)) for r in reactions],
        counts={rt: counts.get(rt, 0) for rt in ReactionType.values},
        total=len(reactions),
    )
