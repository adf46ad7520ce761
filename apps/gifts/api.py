"""
API Router for Gifts app.
Public catalogue, admin management and gift sending.
"""
from typing import List, Optional
from uuid import UUID
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.core.exceptions import status_for
from apps.identity.permissions import Permissions
from apps.identity.security import require_auth, require_permission
from .schemas import (
    GiftIn, GiftUpdateIn, SendGiftIn, GiftOut, GiftPageOut,
    GiftTransactionPageOut, GiftSentOut,
)
from . import services

router = Router(tags=["Gifts"])


@router.get("", response=GiftPageOut, auth=None)
def list_gifts(
    request: HttpRequest,
    category: Optional[str] = None,
    rarity: Optional[str] = None,
    is_active: bool = True,
    page: int = 1,
    limit: int = 20,
):
    try:
        items, meta = services.list_gifts(category, rarity, is_active, page, limit)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return {"items": items, "pagination": meta}


@router.get("/search", response=List[GiftOut], auth=None)
def search_gifts(
    request: HttpRequest,
    q: Optional[str] = None,
    category: Optional[str] = None,
    rarity: Optional[str] = None,
    min_price: Optional[int] = None,
    max_price: Optional[int] = None,
):
    try:
        return services.search_gifts(q, category, rarity, min_price, max_price)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/received", response=GiftTransactionPageOut, auth=None)
def received_gifts(request: HttpRequest, page: int = 1, limit: int = 20):
    user = require_auth(request)
    items, meta = services.received_gifts(user.id, page, limit)
    return {"items": items, "pagination": meta}


@router.get("/sent", response=GiftTransactionPageOut, auth=None)
def sent_gifts(request: HttpRequest, page: int = 1, limit: int = 20):
    user = require_auth(request)
    items, meta = services.sent_gifts(user.id, page, limit)
    return {"items": items, "pagination": meta}


@router.get("/category/{category}", response=List[GiftOut], auth=None)
def gifts_by_category(request: HttpRequest, category: str):
    return services.gifts_by_category(category)


@router.get("/rarity/{rarity}", response=List[GiftOut], auth=None)
def gifts_by_rarity(request: HttpRequest, rarity: str):
    try:
        return services.gifts_by_rarity(rarity)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.get("/{gift_id}", response=GiftOut, auth=None)
def get_gift(request: HttpRequest, gift_id: UUID):
    gift = services.get_gift(gift_id)
    if not gift:
        raise HttpError(404, "Gift not found")
    return gift


@router.post("", response={201: GiftOut}, auth=None)
def create_gift(request: HttpRequest, payload: GiftIn):
    require_permission(request, Permissions.GIFT_MANAGE)
    try:
        return 201, services.create_gift(payload.dict())
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.put("/{gift_id}", response=GiftOut, auth=None)
def update_gift(request: HttpRequest, gift_id: UUID, payload: GiftUpdateIn):
    require_permission(request, Permissions.GIFT_MANAGE)
    try:
        return services.update_gift(gift_id, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.delete("/{gift_id}", response={204: None}, auth=None)
def delete_gift(request: HttpRequest, gift_id: UUID):
    """Soft delete."""
    require_permission(request, Permissions.GIFT_MANAGE)
    try:
        services.deactivate_gift(gift_id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 204, None


@router.post("/{gift_id}/send", response={201: GiftSentOut}, auth=None)
def send_gift(request: HttpRequest, gift_id: UUID, payload: SendGiftIn):
    user = require_permission(request, Permissions.GIFT_SEND)
    try:
        result = services.send_gift(
            user.id, gift_id, payload.recipient_id,
            payload.quantity, payload.message, payload.is_anonymous,
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 201, result
