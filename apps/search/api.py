"""
API Router for Search app.
"""
from typing import Optional
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.core import rate_limit
from apps.core.exceptions import status_for
from .schemas import SearchOut
from . import services

router = Router(tags=["Search"])


@router.get("", response=SearchOut, auth=None)
def search(request: HttpRequest, query: str = "", limit: Optional[str] = None):
    """
    Fuzzy search over users, creators and posts.

    `limit` is the number of results per type (default 3, max 10).
    """
    rate_limit.enforce(request, 'search')
    try:
        return services.search_all(query, limit)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
