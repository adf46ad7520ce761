"""Services for Creators app."""
import logging
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from apps.core.exceptions import ConflictError, NotFoundError
from apps.core.pagination import PageMeta, paginate
from apps.identity.models import UserRole
from apps.identity.services import set_role
from .models import Creator
from .dtos import CreatorDTO

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'stage_name', 'title_bio', 'bio', 'bio_thumbnail', 'service',
    'tags', 'specialties', 'subscription_price',
)


def _clean_list(values) -> List[str]:
    return [str(v).strip() for v in (values or []) if str(v).strip()]


def _to_dto(creator: Creator) -> CreatorDTO:
    return CreatorDTO(
        id=creator.id,
        user_id=creator.user_id,
        stage_name=creator.stage_name,
        title_bio=creator.title_bio,
        bio=creator.bio,
        bio_thumbnail=creator.bio_thumbnail,
        service=creator.service,
        tags=list(creator.tags or []),
        specialties=list(creator.specialties or []),
        rating=creator.rating,
        total_ratings=creator.total_ratings,
        is_verified=creator.is_verified,
        is_live=creator.is_live,
        subscription_price=creator.subscription_price,
        created_at=creator.created_at,
    )


def active_creators():
    """Creators whose account is active."""
    active_users = get_user_model().objects.filter(is_active=True).values('id')
    return Creator.objects.filter(user_id__in=active_users)


def get_creator_dto(creator_id) -> Optional[CreatorDTO]:
    try:
        return _to_dto(Creator.objects.get(id=creator_id))
    except Creator.DoesNotExist:
        return None


def get_creator_by_user(user_id) -> Optional[CreatorDTO]:
    try:
        return _to_dto(Creator.objects.get(user_id=user_id))
    except Creator.DoesNotExist:
        return None


def get_creators_by_ids(creator_ids: Iterable[UUID]) -> Dict[UUID, CreatorDTO]:
    ids = {c for c in creator_ids if c}
    if not ids:
        return {}
    return {c.id: _to_dto(c) for c in Creator.objects.filter(id__in=ids)}


def become_creator(user, data: dict) -> CreatorDTO:
    """Create the caller's creator profile and promote the account to CREATOR."""
    stage_name = (data.get('stage_name') or '').strip()
    if not stage_name:
        raise ValueError("stage_name is required")
    if Creator.objects.filter(user_id=user.id).exists():
        raise ConflictError("You already have a creator profile")

    fields = {k: data[k] for k in EDITABLE_FIELDS if data.get(k) is not None}
    fields['stage_name'] = stage_name
    fields['tags'] = _clean_list(fields.get('tags'))
    fields['specialties'] = _clean_list(fields.get('specialties'))

    try:
        with transaction.atomic():
            creator = Creator.objects.create(user_id=user.id, **fields)
            if user.role not in (UserRole.ADMIN, UserRole.CREATOR):
                set_role(user.id, UserRole.CREATOR)
    except IntegrityError:
        raise ConflictError("You already have a creator profile")

    logger.info(f"User {user.id} became creator {creator.id} ({creator.stage_name})")
    return _to_dto(creator)


def update_creator(user_id, data: dict) -> CreatorDTO:
    try:
        creator = Creator.objects.get(user_id=user_id)
    except Creator.DoesNotExist:
        raise NotFoundError("Creator profile not found")

    for key in EDITABLE_FIELDS:
        value = data.get(key)
        if value is None:
            continue
        if key in ('tags', 'specialties'):
            value = _clean_list(value)
        if key == 'stage_name':
            value = value.strip()
            if not value:
                raise ValueError("stage_name cannot be empty")
        setattr(creator, key, value)
    creator.save()
    return _to_dto(creator)


def set_live(user_id, is_live: bool) -> CreatorDTO:
    updated = Creator.objects.filter(user_id=user_id).update(is_live=is_live)
    if not updated:
        raise NotFoundError("Creator profile not found")
    logger.info(f"Creator (user {user_id}) is_live={is_live}")
    return get_creator_by_user(user_id)


def set_verified(creator_id, is_verified: bool) -> CreatorDTO:
    updated = Creator.objects.filter(id=creator_id).update(is_verified=is_verified)
    if not updated:
        raise NotFoundError("Creator not found")
    return get_creator_dto(creator_id)


def list_creators(
    is_live: Optional[bool] = None,
    is_verified: Optional[bool] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[CreatorDTO], PageMeta]:
    qs = active_creators()
    if is_live is not None:
        qs = qs.filter(is_live=is_live)
    if is_verified is not None:
        qs = qs.filter(is_verified=is_verified)
    rows, meta = paginate(qs.order_by('-rating', '-total_ratings', 'stage_name'), page, limit)
    return [_to_dto(c) for c in rows], meta
