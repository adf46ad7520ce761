"""
Audit log endpoints (admin only).
"""
from typing import Optional
from uuid import UUID
from datetime import date
from django.http import HttpRequest
from django.shortcuts import get_object_or_404
from ninja import Router

from apps.core.pagination import paginate
from apps.identity.permissions import Permissions
from apps.identity.security import require_permission
from .models import AuditLog
from .schemas import AuditLogOut, AuditLogPageOut

router = Router(tags=["Audit"])


def _serialize_log(log: AuditLog) -> AuditLogOut:
    """Convert an AuditLog model instance to its output schema."""
    performed_by_name = None
    if log.performed_by is not None:
        performed_by_name = log.performed_by.get_full_name() or log.performed_by.username

    return AuditLogOut(
        id=log.id,
        action=log.action,
        target_type=log.target_type,
        target_id=log.target_id,
        target_label=log.target_label,
        performed_by_id=log.performed_by_id,
        performed_by_name=performed_by_name,
        performed_at=log.performed_at,
        context=log.context,
    )


@router.get("", response=AuditLogPageOut, auth=None)
def list_audit_logs(
    request: HttpRequest,
    action: Optional[str] = None,
    target_type: Optional[str] = None,
    actor_id: Optional[UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    limit: int = 50,
):
    """
    List audit log entries, newest first.
    Supports filtering by action name, target type, actor and date range.
    """
    require_permission(request, Permissions.AUDIT_VIEW)

    qs = AuditLog.objects.select_related("performed_by")
    if action:
        qs = qs.filter(action=action)
    if target_type:
        qs = qs.filter(target_type=target_type)
    if actor_id:
        qs = qs.filter(performed_by_id=actor_id)
    if start_date:
        qs = qs.filter(performed_at__date__gte=start_date)
    if end_date:
        qs = qs.filter(performed_at__date__lte=end_date)

    rows, meta = paginate(qs, page, limit, max_limit=500)
    return {"items": [_serialize_log(log) for log in rows], "pagination": meta}


@router.get("/{log_id}", response=AuditLogOut, auth=None)
def get_audit_log(request: HttpRequest, log_id: UUID):
    require_permission(request, Permissions.AUDIT_VIEW)
    log = get_object_or_404(AuditLog.objects.select_related("performed_by"), id=log_id)
    return _serialize_log(log)
