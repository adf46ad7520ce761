"""Services for Identity app."""
import logging
from typing import Dict, Iterable, Optional
from uuid import UUID

from django.db import IntegrityError, transaction

from apps.core.exceptions import ConflictError, NotFoundError
from .models import User, UserRole
from .dtos import UserDTO, UserSummaryDTO
from .permissions import get_user_permissions

logger = logging.getLogger(__name__)


def _to_dto(user: User) -> UserDTO:
    return UserDTO(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        avatar=user.avatar,
        is_active=user.is_active,
        permissions=get_user_permissions(user),
    )


def _to_summary(user: User) -> UserSummaryDTO:
    return UserSummaryDTO(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        avatar=user.avatar,
        role=user.role,
        is_online=user.is_online,
        is_active=user.is_active,
        last_seen=user.last_seen,
    )


def get_user_dto(user_id) -> Optional[UserDTO]:
    try:
        return _to_dto(User.objects.get(id=user_id))
    except User.DoesNotExist:
        return None


def get_user_summary(user_id) -> Optional[UserSummaryDTO]:
    try:
        return _to_summary(User.objects.get(id=user_id))
    except User.DoesNotExist:
        return None


def get_user_summaries(user_ids: Iterable[UUID]) -> Dict[UUID, UserSummaryDTO]:
    """Bulk lookup used by list endpoints to embed authors/followers."""
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    return {u.id: _to_summary(u) for u in User.objects.filter(id__in=ids)}


def user_exists(user_id, active_only: bool = True) -> bool:
    qs = User.objects.filter(id=user_id)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.exists()


def register_user(*, username: str, email: str, password: str,
                  first_name: str = "", last_name: str = "", phone: str = "") -> UserDTO:
    """Create a regular USER account. Raises ConflictError on duplicates."""
    if User.objects.filter(username__iexact=username).exists():
        raise ConflictError("Username is already taken")
    if email and User.objects.filter(email__iexact=email).exists():
        raise ConflictError("Email is already registered")

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=username,
                email=email,
                password=password,
                first_name=first_name,
                last_name=last_name,
                phone=phone or "",
                role=UserRole.USER,
                is_active=True,
            )
    except IntegrityError:
        raise ConflictError("Username is already taken")

    logger.info(f"Registered user {user.id} ({user.username})")
    return _to_dto(user)


def update_profile(user_id, data: dict) -> Optional[UserDTO]:
    allowed = {'first_name', 'last_name', 'phone', 'avatar', 'bio'}
    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        return None

    for key, value in data.items():
        if key in allowed and value is not None:
            setattr(user, key, value)
    user.save()
    return _to_dto(user)


def set_role(user_id, role: str) -> UserDTO:
    if role not in UserRole.values:
        raise ValueError(f"Unknown role: {role}")
    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise NotFoundError("User not found")
    if user.role != role:
        logger.info(f"Role change for user {user.id}: {user.role} -> {role}")
        user.role = role
        user.save(update_fields=['role', 'updated_at'])
    return _to_dto(user)


def set_active(user_id, is_active: bool) -> UserDTO:
    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise NotFoundError("User not found")
    user.is_active = is_active
    user.save(update_fields=['is_active', 'updated_at'])
    logger.info(f"User {user.id} {'activated' if is_active else 'deactivated'}")
    return _to_dto(user)
