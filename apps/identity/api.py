"""
Identity API endpoints with JWT authentication.

Provides registration, login, logout, token refresh and profile endpoints.
Tokens are returned in the body and set as httpOnly cookies.
"""
import json
import logging
from uuid import UUID
from ninja import Router
from django.conf import settings
from django.http import HttpRequest, HttpResponse
from ninja.errors import HttpError
from django.contrib.auth import authenticate
from django.contrib.auth.signals import user_logged_in

from apps.core import rate_limit
from apps.core.exceptions import status_for
from .models import User
from .schemas import (
    RegisterIn, LoginIn, RefreshIn, ProfileUpdateIn, UserAdminUpdateIn,
    UserOut, UserSummaryOut, TokenResponse,
)
from . import services
from .security import require_auth, require_admin
from .jwt_auth import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    create_token_pair,
    create_access_token,
    get_user_id_from_token,
    get_access_token_cookie_settings,
    get_refresh_token_cookie_settings,
)

logger = logging.getLogger(__name__)

router = Router(tags=["Identity"])


# =============================================================================
# Helper Functions
# =============================================================================

def is_production() -> bool:
    return not settings.DEBUG


def _token_response(user: User, status: int = 200, refresh: bool = True) -> HttpResponse:
    """Build a JSON response carrying fresh tokens in body and cookies."""
    if refresh:
        access_token, refresh_token = create_token_pair(user.id, user.role)
    else:
        access_token, refresh_token = create_access_token(user.id, user.role), None

    body = TokenResponse(
        success=True,
        user=services.get_user_dto(user.id),
        access_token=access_token,
        refresh_token=refresh_token,
    )
    response = HttpResponse(body.model_dump_json(), content_type='application/json', status=status)

    prod = is_production()
    response.set_cookie(ACCESS_COOKIE, access_token, **get_access_token_cookie_settings(prod))
    if refresh_token:
        response.set_cookie(REFRESH_COOKIE, refresh_token, **get_refresh_token_cookie_settings(prod))
    return response


# =============================================================================
# Auth Endpoints
# =============================================================================

@router.post("/auth/register", auth=None)
def register(request: HttpRequest, payload: RegisterIn):
    """Create an account and sign it in."""
    rate_limit.enforce(request, 'auth')
    if len(payload.password) < 6:
        raise HttpError(400, "Password must be at least 6 characters")
    if not payload.username.strip():
        raise HttpError(400, "Username is required")

    try:
        dto = services.register_user(
            username=payload.username.strip(),
            email=payload.email.strip(),
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone or "",
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))

    user = User.objects.get(id=dto.id)
    return _token_response(user, status=201)


@router.post("/auth/login", auth=None)
def login_user(request: HttpRequest, payload: LoginIn):
    """
    Authenticate user and issue JWT tokens.

    Returns user data and tokens; also sets access_token and refresh_token cookies.
    """
    rate_limit.enforce(request, 'auth')
    user = authenticate(request, username=payload.username, password=payload.password)

    if user is None:
        # ModelBackend returns None for inactive users too
        inactive = User.objects.filter(username=payload.username, is_active=False).exists()
        logger.info(f"Failed login for username={payload.username!r}")
        raise HttpError(401, "Account is disabled" if inactive else "Invalid username or password")

    user_logged_in.send(sender=user.__class__, request=request, user=user)
    return _token_response(user)


@router.post("/auth/logout", response=TokenResponse, auth=None)
def logout_user(request: HttpRequest):
    """Clear authentication cookies."""
    response = HttpResponse(
        TokenResponse(success=True, message="Logged out").model_dump_json(),
        content_type='application/json'
    )
    response.delete_cookie(ACCESS_COOKIE, path='/')
    response.delete_cookie(REFRESH_COOKIE, path='/')
    return response


@router.post("/auth/refresh", auth=None)
def refresh_token(request: HttpRequest):
    """
    Exchange a refresh token (cookie or JSON body) for a new access token.
    """
    token = request.COOKIES.get(REFRESH_COOKIE)
    if not token and request.body:
        try:
            token = RefreshIn(**json.loads(request.body)).refresh_token
        except (ValueError, TypeError):
            raise HttpError(400, "Malformed request body")
    if not token:
        raise HttpError(401, "No refresh token")

    user_id = get_user_id_from_token(token, token_type='refresh')
    if not user_id:
        raise HttpError(401, "Invalid refresh token")

    try:
        user = User.objects.get(id=user_id, is_active=True)
    except User.DoesNotExist:
        raise HttpError(401, "Invalid refresh token")

    return _token_response(user, refresh=False)


@router.get("/auth/me", response=UserOut, auth=None)
def get_me(request: HttpRequest):
    """Get current authenticated user's profile."""
    user = require_auth(request)
    dto = services.get_user_dto(user.id)
    if not dto:
        raise HttpError(404, "User not found")
    return dto


@router.put("/auth/me", response=UserOut, auth=None)
def update_me(request: HttpRequest, payload: ProfileUpdateIn):
    user = require_auth(request)
    return services.update_profile(user.id, payload.dict(exclude_unset=True))


# =============================================================================
# Users
# =============================================================================

@router.get("/users/{user_id}", response=UserSummaryOut, auth=None)
def get_user(request: HttpRequest, user_id: UUID):
    """Public profile."""
    summary = services.get_user_summary(user_id)
    if not summary or not summary.is_active:
        raise HttpError(404, "User not found")
    return summary


@router.patch("/users/{user_id}", response=UserOut, auth=None)
def admin_update_user(request: HttpRequest, user_id: UUID, payload: UserAdminUpdateIn):
    """Change a user's role or disable the account. Admin only."""
    admin = require_admin(request)
    if user_id == admin.id and payload.is_active is False:
        raise HttpError(400, "You cannot disable your own account")

    try:
        dto = None
        if payload.role is not None:
            dto = services.set_role(user_id, payload.role)
        if payload.is_active is not None:
            dto = services.set_active(user_id, payload.is_active)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))

    dto = dto or services.get_user_dto(user_id)
    if not dto:
        raise HttpError(404, "User not found")
    return dto
