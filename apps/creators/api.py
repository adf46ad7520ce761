"""
API Router for Creators app.
Follower management for creators lives in apps.social.
"""
from typing import Optional
from uuid import UUID
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.core.exceptions import status_for
from apps.identity.permissions import Permissions
from apps.identity.security import require_auth, require_permission, require_admin
from .schemas import CreatorIn, CreatorUpdateIn, LiveIn, VerifyIn, CreatorOut, CreatorPageOut
from . import services

router = Router(tags=["Creators"])


@router.get("", response=CreatorPageOut, auth=None)
def list_creators(
    request: HttpRequest,
    is_live: Optional[bool] = None,
    is_verified: Optional[bool] = None,
    page: int = 1,
    limit: int = 20,
):
    items, meta = services.list_creators(is_live, is_verified, page, limit)
    return {"items": items, "pagination": meta}


@router.post("", response={201: CreatorOut}, auth=None)
def become_creator(request: HttpRequest, payload: CreatorIn):
    """Register the current user as a creator."""
    user = require_permission(request, Permissions.CREATOR_PROFILE)
    try:
        creator = services.become_creator(user, payload.dict())
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 201, creator


@router.get("/me", response=CreatorOut, auth=None)
def get_my_profile(request: HttpRequest):
    user = require_auth(request)
    creator = services.get_creator_by_user(user.id)
    if not creator:
        raise HttpError(404, "Creator profile not found")
    return creator


@router.put("/me", response=CreatorOut, auth=None)
def update_my_profile(request: HttpRequest, payload: CreatorUpdateIn):
    user = require_permission(request, Permissions.CREATOR_PROFILE)
    try:
        return services.update_creator(user.id, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.patch("/me/live", response=CreatorOut, auth=None)
def set_live(request: HttpRequest, payload: LiveIn):
    """Go live or end a live session."""
    user = require_permission(request, Permissions.CREATOR_PROFILE)
    try:
        return services.set_live(user.id, payload.is_live)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/{creator_id}", response=CreatorOut, auth=None)
def get_creator(request: HttpRequest, creator_id: UUID):
    creator = services.get_creator_dto(creator_id)
    if not creator:
        raise HttpError(404, "Creator not found")
    return creator


@router.patch("/{creator_id}/verify", response=CreatorOut, auth=None)
def verify_creator(request: HttpRequest, creator_id: UUID, payload: VerifyIn):
    require_admin(request)
    try:
        return services.set_verified(creator_id, payload.is_verified)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
