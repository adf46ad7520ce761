"""Services for Gifts app: catalogue management and token-paid gift sending."""
import logging
from typing import List, Optional, Tuple

from django.db import transaction
from django.db.models import Q

from apps.audit.audit_service import log_action, AuditAction
from apps.core.exceptions import NotFoundError
from apps.core.pagination import PageMeta, paginate
from apps.identity.services import get_user_summaries, user_exists
from apps.ledger.services import move_tokens
from .models import Gift, GiftRarity, GiftTransaction
from .dtos import GiftDTO, GiftSentDTO, GiftTransactionDTO

logger = logging.getLogger(__name__)

GIFT_FIELDS = ('name', 'description', 'image_url', 'animation_url', 'price', 'category', 'rarity', 'is_active')


def _to_dto(gift: Gift) -> GiftDTO:
    return GiftDTO(
        id=gift.id,
        name=gift.name,
        description=gift.description,
        image_url=gift.image_url,
        animation_url=gift.animation_url,
        price=gift.price,
        category=gift.category,
        rarity=gift.rarity,
        is_active=gift.is_active,
        created_at=gift.created_at,
    )


def _normalize_rarity(rarity: Optional[str]) -> Optional[str]:
    if rarity is None:
        return None
    rarity = rarity.upper()
    if rarity not in GiftRarity.values:
        raise ValueError(f"Invalid rarity: {rarity}")
    return rarity


# =============================================================================
# Catalogue
# =============================================================================

def list_gifts(
    category: Optional[str] = None,
    rarity: Optional[str] = None,
    is_active: bool = True,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[GiftDTO], PageMeta]:
    qs = Gift.objects.filter(is_active=is_active)
    if category:
        qs = qs.filter(category=category)
    if rarity:
        qs = qs.filter(rarity=_normalize_rarity(rarity))
    rows, meta = paginate(qs.order_by('-created_at'), page, limit)
    return [_to_dto(g) for g in rows], meta


def search_gifts(
    q: Optional[str] = None,
    category: Optional[str] = None,
    rarity: Optional[str] = None,
    min_price: Optional[int] = None,
    max_price: Optional[int] = None,
) -> List[GiftDTO]:
    qs = Gift.objects.filter(is_active=True)
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(description__icontains=q))
    if category:
        qs = qs.filter(category=category)
    if rarity:
        qs = qs.filter(rarity=_normalize_rarity(rarity))
    if min_price is not None:
        qs = qs.filter(price__gte=min_price)
    if max_price is not None:
        qs = qs.filter(price__lte=max_price)
    return [_to_dto(g) for g in qs.order_by('-created_at')]


def gifts_by_category(category: str) -> List[GiftDTO]:
    return [_to_dto(g) for g in Gift.objects.filter(category=category, is_active=True).order_by('price')]


def gifts_by_rarity(rarity: str) -> List[GiftDTO]:
    rarity = _normalize_rarity(rarity)
    return [_to_dto(g) for g in Gift.objects.filter(rarity=rarity, is_active=True).order_by('price')]


def get_gift(gift_id) -> Optional[GiftDTO]:
    gift = Gift.objects.filter(id=gift_id, is_active=True).first()
    return _to_dto(gift) if gift else None


def create_gift(data: dict) -> GiftDTO:
    fields = {k: data[k] for k in GIFT_FIELDS if data.get(k) is not None}
    if not (fields.get('name') or '').strip():
        raise ValueError("name is required")
    if int(fields.get('price') or 0) < 1:
        raise ValueError("price must be at least 1 token")
    fields['rarity'] = _normalize_rarity(fields.get('rarity')) or GiftRarity.COMMON
    gift = Gift.objects.create(**fields)
    logger.info(f"Gift {gift.id} created: {gift.name} at {gift.price} tokens")
    return _to_dto(gift)


def update_gift(gift_id, data: dict) -> GiftDTO:
    try:
        gift = Gift.objects.get(id=gift_id)
    except Gift.DoesNotExist:
        raise NotFoundError("Gift not found")
    for key in GIFT_FIELDS:
        value = data.get(key)
        if value is None:
            continue
        if key == 'rarity':
            value = _normalize_rarity(value)
        if key == 'price' and int(value) < 1:
            raise ValueError("price must be at least 1 token")
        setattr(gift, key, value)
    gift.save()
    return _to_dto(gift)


def deactivate_gift(gift_id) -> None:
    """Soft delete: the gift stays referenced by past transactions."""
    updated = Gift.objects.filter(id=gift_id).update(is_active=False)
    if not updated:
        raise NotFoundError("Gift not found")
    logger.info(f"Gift {gift_id} deactivated")


# =============================================================================
# Sending
# =============================================================================

def send_gift(
    sender_id,
    gift_id,
    recipient_id,
    quantity: int = 1,
    message: str = "",
    is_anonymous: bool = False,
) -> GiftSentDTO:
    """
    Pay price * quantity tokens from the sender to the recipient.

    The token move, both ledger entries and the gift transaction are written
    in one database transaction.
    """
    if quantity < 1:
        raise ValueError("Quantity must be at least 1")
    if sender_id == recipient_id:
        raise ValueError("You cannot send a gift to yourself")
    gift = Gift.objects.filter(id=gift_id, is_active=True).first()
    if gift is None:
        raise NotFoundError("Gift not found or is no longer available")
    if not user_exists(recipient_id):
        raise NotFoundError("Recipient not found")

    total = gift.price * quantity
    with transaction.atomic():
        record = GiftTransaction.objects.create(
            sender_id=sender_id,
            recipient_id=recipient_id,
            gift_id=gift.id,
            quantity=quantity,
            total_tokens=total,
            message=message or "",
            is_anonymous=is_anonymous,
        )
        moved = move_tokens(
            sender_id, recipient_id, total,
            description=f"Gift: {quantity} x {gift.name}",
            related_request_id=record.id,
        )

    logger.info(f"Gift {gift.id} x{quantity} ({total} tokens) from {sender_id} to {recipient_id}")
    log_action(
        action=AuditAction.GIFT_SENT,
        target_type="GiftTransaction",
        target_id=record.id,
        target_label=f"{quantity} x {gift.name}",
        performed_by=sender_id,
        context={"tokens": total, "recipient_id": str(recipient_id)},
    )
    return GiftSentDTO(
        transaction=_history([record], reveal_sender=True)[0],
        remaining_tokens=moved.sender_tokens,
    )


def _history(records: List[GiftTransaction], reveal_sender: bool) -> List[GiftTransactionDTO]:
    gifts = Gift.objects.in_bulk({r.gift_id for r in records})
    users = get_user_summaries({r.sender_id for r in records} | {r.recipient_id for r in records})
    result = []
    for r in records:
        hide = r.is_anonymous and not reveal_sender
        gift = gifts.get(r.gift_id)
        result.append(GiftTransactionDTO(
            id=r.id,
            sender_id=None if hide else r.sender_id,
            recipient_id=r.recipient_id,
            gift_id=r.gift_id,
            quantity=r.quantity,
            total_tokens=r.total_tokens,
            message=r.message,
            is_anonymous=r.is_anonymous,
            created_at=r.created_at,
            gift=_to_dto(gift) if gift else None,
            sender=None if hide else users.get(r.sender_id),
            recipient=users.get(r.recipient_id),
        ))
    return result


def received_gifts(user_id, page: int = 1, limit: int = 20) -> Tuple[List[GiftTransactionDTO], PageMeta]:
    """Gifts received by the user. Anonymous senders are hidden."""
    rows, meta = paginate(GiftTransaction.objects.filter(recipient_id=user_id).order_by('-created_at'), page, limit)
    return _history(rows, reveal_sender=False), meta


def sent_gifts(user_id, page: int = 1, limit: int = 20) -> Tuple[List[GiftTransactionDTO], PageMeta]:
    rows, meta = paginate(GiftTransaction.objects.filter(sender_id=user_id).order_by('-created_at'), page, limit)
    return _history(rows, reveal_sender=True), meta
