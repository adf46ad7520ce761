"""
Request guards shared by every app's API module.
"""
from django.http import HttpRequest
from ninja.errors import HttpError

from .permissions import get_user_permissions, is_admin


def require_auth(request: HttpRequest):
    """Ensure user is authenticated. Returns the user."""
    user = getattr(request, 'user', None)
    if not user or not user.is_authenticated:
        raise HttpError(401, "Authentication required")
    if not user.is_active:
        raise HttpError(401, "Account is disabled")
    return user


def require_permission(request: HttpRequest, permission: str):
    """Ensure user has the required permission. Returns the user."""
    user = require_auth(request)
    if permission not in get_user_permissions(user):
        raise HttpError(403, f"Permission denied: {permission}")
    return user


def require_admin(request: HttpRequest):
    user = require_auth(request)
    if not is_admin(user):
        raise HttpError(403, "Admin access required")
    return user


def optional_user(request: HttpRequest):
    """The authenticated user, or None for anonymous callers."""
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user
    return None
