"""Service-level endpoints."""
import logging

from django.db import connection, DatabaseError
from django.http import HttpRequest
from ninja import Router, Schema

logger = logging.getLogger(__name__)

router = Router(tags=["Health"])


class HealthOut(Schema):
    status: str
    database: bool


@router.get("/health", response=HealthOut, auth=None)
def health(request: HttpRequest):
    """Liveness check."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        db_ok = True
    except DatabaseError:
        logger.exception("Health check: database unreachable")
        db_ok = False
    return HealthOut(status="ok", database=db_ok)
