"""
API Router for Social app.
Posts, comments, reactions, stories and follows.
"""
from typing import List, Optional
from uuid import UUID
from ninja import Router, File, Form
from ninja.errors import HttpError
from ninja.files import UploadedFile
from django.http import HttpRequest

from apps.core.exceptions import status_for
from apps.identity.permissions import Permissions, is_admin
from apps.identity.security import require_auth, require_permission, optional_user
from .models import ReactionTarget
from .schemas import (
    PostIn, PostUpdateIn, CommentIn, ReactionIn, FollowIn,
    PostOut, PostPageOut, CommentOut, ReplyOut, CommentPageOut,
    ReactionToggleOut, ReactionSummaryOut, StoryOut, StoryGroupOut,
    StoryViewerOut, FollowStateOut, UserPageOut, MessageOut,
)
from . import post_service, comment_service, reaction_service, story_service, follow_service

router = Router(tags=["Social"])


def _viewer_id(request: HttpRequest):
    user = optional_user(request)
    return user.id if user else None


# =============================================================================
# Posts
# =============================================================================

@router.post("/posts", response={201: PostOut}, auth=None)
def create_post(request: HttpRequest, payload: PostIn):
    user = require_permission(request, Permissions.SOCIAL_INTERACT)
    try:
        return 201, post_service.create_post(user.id, payload.dict())
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/posts", response=PostPageOut, auth=None)
def list_posts(request: HttpRequest, user_id: Optional[UUID] = None, page: int = 1, limit: int = 10):
    items, meta = post_service.list_posts(user_id, page, limit)
    return {"items": items, "pagination": meta}


@router.get("/posts/{post_id}", response=PostOut, auth=None)
def get_post(request: HttpRequest, post_id: UUID):
    try:
        return post_service.view_post(post_id, _viewer_id(request))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.put("/posts/{post_id}", response=PostOut, auth=None)
def update_post(request: HttpRequest, post_id: UUID, payload: PostUpdateIn):
    user = require_permission(request, Permissions.SOCIAL_INTERACT)
    try:
        return post_service.update_post(post_id, user.id, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.delete("/posts/{post_id}", response={204: None}, auth=None)
def delete_post(request: HttpRequest, post_id: UUID):
    user = require_auth(request)
    try:
        post_service.delete_post(post_id, user.id, as_admin=is_admin(user))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 204, None


# =============================================================================
# Comments
# =============================================================================

@router.post("/posts/{post_id}/comments", response={201: CommentOut}, auth=None)
def create_comment(request: HttpRequest, post_id: UUID, payload: CommentIn):
    user = require_permission(request, Permissions.SOCIAL_INTERACT)
    try:
        return 201, comment_service.create_comment(post_id, user.id, payload.content)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/posts/{post_id}/comments", response=CommentPageOut, auth=None)
def list_post_comments(
    request: HttpRequest,
    post_id: UUID,
    page: int = 1,
    limit: int = 10,
    sort_by: str = 'created_at',
    order: str = 'desc',
):
    """Root comments with their first three replies."""
    try:
        items, meta = comment_service.list_post_comments(
            post_id, _viewer_id(request), page, limit, sort_by, order
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return {"items": items, "pagination": meta}


@router.get("/comments/{comment_id}", response=CommentOut, auth=None)
def get_comment(request: HttpRequest, comment_id: UUID):
    try:
        return comment_service.get_comment(comment_id, _viewer_id(request))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.put("/comments/{comment_id}", response=CommentOut, auth=None)
def update_comment(request: HttpRequest, comment_id: UUID, payload: CommentIn):
    user = require_permission(request, Permissions.SOCIAL_INTERACT)
    try:
        return comment_service.update_comment(
            comment_id, user.id, payload.content, as_admin=is_admin(user)
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.delete("/comments/{comment_id}", response={204: None}, auth=None)
def delete_comment(request: HttpRequest, comment_id: UUID):
    user = require_auth(request)
    try:
        comment_service.delete_comment(comment_id, user.id, as_admin=is_admin(user))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 204, None


@router.get("/comments/{comment_id}/replies", response=CommentPageOut, auth=None)
def list_replies(request: HttpRequest, comment_id: UUID, page: int = 1, limit: int = 10):
    try:
        items, meta = comment_service.list_replies(comment_id, _viewer_id(request), page, limit)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return {"items": items, "pagination": meta}


@router.post("/comments/{comment_id}/replies", response={201: ReplyOut}, auth=None)
def create_reply(request: HttpRequest, comment_id: UUID, payload: CommentIn):
    user = require_permission(request, Permissions.SOCIAL_INTERACT)
    try:
        return 201, comment_service.create_reply(comment_id, user.id, payload.content)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


# =============================================================================
# Reactions
# =============================================================================

@router.post("/reactions", response={200: ReactionToggleOut, 201: ReactionToggleOut}, auth=None)
def toggle_reaction(request: HttpRequest, payload: ReactionIn):
    """Add, switch or remove a reaction. 201 when a new reaction was created."""
    user = require_permission(request, Permissions.SOCIAL_INTERACT)
    try:
        result = reaction_service.toggle_reaction(
            user.id, payload.reaction_type, payload.post_id, payload.comment_id
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    status = 201 if result.action == reaction_service.ADDED else 200
    return status, result


@router.get("/posts/{post_id}/reactions", response=ReactionSummaryOut, auth=None)
def post_reactions(request: HttpRequest, post_id: UUID):
    try:
        return reaction_service.summarize(ReactionTarget.POST, post_id, _viewer_id(request))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/comments/{comment_id}/reactions", response=ReactionSummaryOut, auth=None)
def comment_reactions(request: HttpRequest, comment_id: UUID):
    try:
        return reaction_service.summarize(ReactionTarget.COMMENT, comment_id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


# =============================================================================
# Stories
# =============================================================================

@router.post("/stories", response={201: StoryOut}, auth=None)
def create_story(
    request: HttpRequest,
    media: Optional[UploadedFile] = File(None),
    media_type: str = Form("IMAGE"),
    content: str = Form(""),
):
    """Upload a story (multipart form with a `media` file)."""
    user = require_permission(request, Permissions.SOCIAL_INTERACT)
    try:
        return 201, story_service.create_story(user.id, media, media_type, content)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/stories", response=List[StoryGroupOut], auth=None)
def story_feed(request: HttpRequest):
    user = require_auth(request)
    return story_service.story_feed(user.id)


@router.post("/stories/{story_id}/view", response=StoryOut, auth=None)
def view_story(request: HttpRequest, story_id: UUID):
    user = require_auth(request)
    try:
        return story_service.view_story(story_id, user.id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/stories/{story_id}/viewers", response=List[StoryViewerOut], auth=None)
def story_viewers(request: HttpRequest, story_id: UUID):
    user = require_auth(request)
    try:
        return story_service.list_viewers(story_id, user.id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.delete("/stories/{story_id}", response={204: None}, auth=None)
def delete_story(request: HttpRequest, story_id: UUID):
    user = require_auth(request)
    try:
        story_service.delete_story(story_id, user.id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 204, None


# =============================================================================
# Follows
# =============================================================================

@router.post("/follows", response={201: MessageOut}, auth=None)
def follow_creator(request: HttpRequest, payload: FollowIn):
    user = require_permission(request, Permissions.SOCIAL_INTERACT)
    try:
        follow_service.follow_creator(user.id, payload.creator_id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 201, {"message": "Followed successfully"}


@router.delete("/follows/{creator_id}", response=MessageOut, auth=None)
def unfollow_creator(request: HttpRequest, creator_id: UUID):
    user = require_auth(request)
    try:
        follow_service.unfollow_creator(user.id, creator_id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return {"message": "Unfollowed successfully"}


@router.post("/follows/users/{user_id}/toggle", response=FollowStateOut, auth=None)
def toggle_user_follow(request: HttpRequest, user_id: UUID):
    user = require_permission(request, Permissions.SOCIAL_INTERACT)
    try:
        return {"is_following": follow_service.toggle_user_follow(user.id, user_id)}
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/follows/{user_id}/followers", response=UserPageOut, auth=None)
def list_followers(request: HttpRequest, user_id: UUID, page: int = 1, limit: int = 20):
    try:
        items, meta = follow_service.list_followers(user_id, page, limit)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return {"items": items, "pagination": meta}


@router.get("/follows/{user_id}/following", response=UserPageOut, auth=None)
def list_following(request: HttpRequest, user_id: UUID, page: int = 1, limit: int = 20):
    try:
        items, meta = follow_service.list_following(user_id, page, limit)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return {"items": items, "pagination": meta}


@router.get("/creators/me/followers", response=UserPageOut, auth=None)
def my_followers(request: HttpRequest, page: int = 1, limit: int = 20):
    """Followers of the current creator."""
    user = require_permission(request, Permissions.CREATOR_PROFILE)
    items, meta = follow_service.list_followers(user.id, page, limit)
    return {"items": items, "pagination": meta}


@router.delete("/creators/me/followers/{follower_id}", response=MessageOut, auth=None)
def remove_follower(request: HttpRequest, follower_id: UUID):
    user = require_permission(request, Permissions.CREATOR_PROFILE)
    try:
        follow_service.remove_follower(user.id, follower_id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return {"message": "Follower removed"}
