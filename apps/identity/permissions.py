from typing import List, Dict
from .models import UserRole, User


class Permissions:
    # Ledger
    WALLET_USE = "ledger.use_wallet"
    LEDGER_MANAGE = "ledger.manage"

    # Social
    SOCIAL_INTERACT = "social.interact"
    SOCIAL_MODERATE = "social.moderate"

    # Creators
    CREATOR_PROFILE = "creators.manage_profile"

    # Subscriptions
    SUBSCRIPTION_PURCHASE = "subscriptions.purchase"
    SUBSCRIPTION_MANAGE = "subscriptions.manage"

    # Gifts
    GIFT_SEND = "gifts.send"
    GIFT_MANAGE = "gifts.manage"

    # Reports
    REPORT_CREATE = "reports.create"
    REPORT_MANAGE = "reports.manage"

    # Identity / Audit
    IDENTITY_MANAGE_USER = "identity.manage_user"
    AUDIT_VIEW = "audit.view"


_MEMBER_PERMISSIONS = [
    Permissions.WALLET_USE,
    Permissions.SOCIAL_INTERACT,
    Permissions.CREATOR_PROFILE,
    Permissions.GIFT_SEND,
    Permissions.REPORT_CREATE,
]


# Static Role -> Permission Mapping
ROLE_PERMISSIONS: Dict[str, List[str]] = {
    UserRole.ADMIN: _MEMBER_PERMISSIONS + [
        Permissions.LEDGER_MANAGE,
        Permissions.SOCIAL_MODERATE,
        Permissions.SUBSCRIPTION_MANAGE,
        Permissions.GIFT_MANAGE,
        Permissions.REPORT_MANAGE,
        Permissions.IDENTITY_MANAGE_USER,
        Permissions.AUDIT_VIEW,
    ],
    UserRole.CREATOR: _MEMBER_PERMISSIONS + [
        Permissions.SUBSCRIPTION_PURCHASE,
    ],
    UserRole.USER: list(_MEMBER_PERMISSIONS),
    # Guests browse only
    UserRole.GUEST: [],
}


def get_user_permissions(user: User) -> List[str]:
    """
    Returns a list of permission strings for the given user based on their role.
    Superusers are treated as administrators.
    """
    if not user or not user.is_active:
        return []
    if user.is_superuser:
        return list(ROLE_PERMISSIONS[UserRole.ADMIN])
    return list(ROLE_PERMISSIONS.get(user.role, []))


def is_admin(user: User) -> bool:
    return bool(user and user.is_authenticated and (user.is_superuser or user.role == UserRole.ADMIN))
