"""
Fixed-window rate limiting on top of the Django cache.

Each bucket is one integer counter per window, bumped with cache.incr.
With a shared cache (Redis) the increment is atomic, so the limit holds
across workers.
"""
import logging
import time
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.http import HttpRequest
from ninja.errors import HttpError

logger = logging.getLogger(__name__)


def client_ip(request: HttpRequest) -> str:
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


def hit(key: str, *, window_secs: int, max_hits: int) -> int:
    """Record one hit in the current window and return the hits counted in it."""
    if max_hits <= 0:
        return 0
    window = max(1, window_secs)
    bucket = f"{key}:{int(time.time() // window)}"
    cache.add(bucket, 0, timeout=window)
    try:
        return cache.incr(bucket)
    except ValueError:
        # counter expired between add and incr
        cache.set(bucket, 1, timeout=window)
        return 1


def enforce(request: HttpRequest, scope: str, identity: Optional[str] = None) -> None:
    """
    Raise HttpError(429) when the caller exceeded the limit for `scope`.

    The bucket is keyed by `identity` (a user id) when given, else by client IP.
    """
    if not getattr(settings, 'RATE_LIMIT_ENABLED', True):
        return
    max_hits = settings.RATE_LIMITS.get(scope, 0)
    window = settings.RATE_LIMIT_WINDOW_SECONDS
    who = identity or client_ip(request)
    hits = hit(f"ratelimit:{scope}:{who}", window_secs=window, max_hits=max_hits)
    if max_hits and hits > max_hits:
        logger.warning(f"Rate limit exceeded: scope={scope} who={who} hits={hits}")
        raise HttpError(429, "Too many requests, please try again later.")
