import logging
from django.utils import timezone
from django.utils.deprecation import MiddlewareMixin

from .jwt_auth import get_token_from_request, get_user_id_from_token
from .models import User

logger = logging.getLogger(__name__)


class JWTAuthenticationMiddleware(MiddlewareMixin):
    """
    Resolves a JWT access token into request.user.

    Must run after AuthenticationMiddleware. A valid token wins over the
    session user; an invalid or expired token leaves the session user
    (usually AnonymousUser) in place.
    """

    def process_request(self, request):
        token = get_token_from_request(request)
        if not token:
            return

        user_id = get_user_id_from_token(token)
        if not user_id:
            logger.debug("Rejected invalid or expired access token")
            return

        try:
            user = User.objects.get(id=user_id, is_active=True)
        except User.DoesNotExist:
            logger.warning(f"Access token for unknown or inactive user {user_id}")
            return

        request.user = user
        request._cached_user = user
        request.token_authenticated = True

    def process_response(self, request, response):
        user = getattr(request, 'user', None)
        if getattr(request, 'token_authenticated', False) and user is not None:
            # Presence stamp, at most once a minute per user
            now = timezone.now()
            if not user.last_seen or (now - user.last_seen).total_seconds() > 60:
                User.objects.filter(id=user.id).update(last_seen=now)
        return response
