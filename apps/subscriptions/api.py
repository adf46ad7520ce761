"""
API Router for Subscriptions app.
Stream package catalogue (admin managed) and creator package subscriptions.
"""
from typing import Optional
from uuid import UUID
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.core.exceptions import status_for
from apps.identity.permissions import Permissions, is_admin
from apps.identity.security import require_auth, require_permission
from .schemas import (
    StreamPackageIn, StreamPackageUpdateIn, SubscribeIn,
    StreamPackageOut, StreamPackagePageOut, SubscriptionOut, SubscriptionPageOut,
)
from . import services

router = Router(tags=["Subscriptions"])


# =============================================================================
# Stream Packages
# =============================================================================

@router.get("/stream-packages", response=StreamPackagePageOut, auth=None)
def list_packages(request: HttpRequest, page: int = 1, limit: int = 10):
    """Packages by price. Only admins see inactive ones."""
    user = require_auth(request)
    items, meta = services.list_packages(not is_admin(user), page, limit)
    return {"items": items, "pagination": meta}


@router.get("/stream-packages/{package_id}", response=StreamPackageOut, auth=None)
def get_package(request: HttpRequest, package_id: UUID):
    user = require_auth(request)
    package = services.get_package(package_id, active_only=not is_admin(user))
    if not package:
        raise HttpError(404, "Stream package not found")
    return package


@router.post("/stream-packages", response={201: StreamPackageOut}, auth=None)
def create_package(request: HttpRequest, payload: StreamPackageIn):
    require_permission(request, Permissions.SUBSCRIPTION_MANAGE)
    try:
        return 201, services.create_package(payload.dict())
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.put("/stream-packages/{package_id}", response=StreamPackageOut, auth=None)
def update_package(request: HttpRequest, package_id: UUID, payload: StreamPackageUpdateIn):
    require_permission(request, Permissions.SUBSCRIPTION_MANAGE)
    try:
        return services.update_package(package_id, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.delete("/stream-packages/{package_id}", response={204: None}, auth=None)
def delete_package(request: HttpRequest, package_id: UUID):
    require_permission(request, Permissions.SUBSCRIPTION_MANAGE)
    try:
        services.delete_package(package_id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 204, None


# =============================================================================
# Creator Subscriptions
# =============================================================================

@router.post("/subscriptions", response={201: SubscriptionOut}, auth=None)
def subscribe(request: HttpRequest, payload: SubscribeIn):
    """Buy a stream package with the wallet balance."""
    user = require_permission(request, Permissions.SUBSCRIPTION_PURCHASE)
    try:
        return 201, services.subscribe(user.id, payload.package_id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/subscriptions/me", response=Optional[SubscriptionOut], auth=None)
def my_subscription(request: HttpRequest):
    user = require_permission(request, Permissions.SUBSCRIPTION_PURCHASE)
    return services.get_my_subscription(user.id)


@router.patch("/subscriptions/me/cancel", response=SubscriptionOut, auth=None)
def cancel_subscription(request: HttpRequest):
    user = require_permission(request, Permissions.SUBSCRIPTION_PURCHASE)
    try:
        return services.cancel_subscription(user.id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/subscriptions", response=SubscriptionPageOut, auth=None)
def list_subscriptions(
    request: HttpRequest,
    status: Optional[str] = None,
    creator_id: Optional[UUID] = None,
    package_id: Optional[UUID] = None,
    page: int = 1,
    limit: int = 10,
):
    """Admins see every subscription; creators see their own."""
    user = require_auth(request)
    if is_admin(user):
        items, meta = services.list_subscriptions(creator_id, status, package_id, page, limit)
    else:
        require_permission(request, Permissions.SUBSCRIPTION_PURCHASE)
        items, meta = services.list_subscriptions(user.id, page=page, limit=limit)
    return {"items": items, "pagination": meta}
