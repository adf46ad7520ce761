"""
API Router for Reports app.
Users file reports; admins review them.
"""
from typing import Optional
from uuid import UUID
from datetime import date
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.core.exceptions import status_for
from apps.identity.permissions import Permissions, is_admin
from apps.identity.security import require_auth, require_permission
from .schemas import ReportIn, ReportUpdateIn, ReportOut, ReportPageOut, ReportStatsOut
from . import services

router = Router(tags=["Reports"])


@router.post("", response={201: ReportOut}, auth=None)
def create_report(request: HttpRequest, payload: ReportIn):
    user = require_permission(request, Permissions.REPORT_CREATE)
    try:
        report = services.create_report(
            user.id, payload.reported_user_id, payload.type, payload.reason, payload.evidence
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 201, report


@router.get("", response=ReportPageOut, auth=None)
def list_reports(
    request: HttpRequest,
    status: Optional[str] = None,
    type: Optional[str] = None,
    sort_by: str = 'created_at',
    sort_order: str = 'desc',
    page: int = 1,
    limit: int = 10,
):
    require_permission(request, Permissions.REPORT_MANAGE)
    try:
        items, meta = services.list_reports(status, type, sort_by, sort_order, page, limit)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return {"items": items, "pagination": meta}


@router.get("/me", response=ReportPageOut, auth=None)
def my_reports(request: HttpRequest, page: int = 1, limit: int = 10):
    user = require_auth(request)
    items, meta = services.my_reports(user.id, page, limit)
    return {"items": items, "pagination": meta}


@router.get("/stats", response=ReportStatsOut, auth=None)
def report_stats(request: HttpRequest, start_date: Optional[date] = None, end_date: Optional[date] = None):
    """Totals by status and type plus daily counts."""
    require_permission(request, Permissions.REPORT_MANAGE)
    return services.report_stats(start_date, end_date)


@router.get("/{report_id}", response=ReportOut, auth=None)
def get_report(request: HttpRequest, report_id: UUID):
    user = require_auth(request)
    try:
        return services.get_report(report_id, user.id, as_admin=is_admin(user))
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.patch("/{report_id}", response=ReportOut, auth=None)
def update_report(request: HttpRequest, report_id: UUID, payload: ReportUpdateIn):
    admin = require_permission(request, Permissions.REPORT_MANAGE)
    try:
        return services.update_report(
            report_id, admin.id, payload.status, payload.admin_notes, payload.action_taken
        )
    except ValueError as e:
        raise HttpError(status_for(e), str(e))


@router.delete("/{report_id}", response={204: None}, auth=None)
def delete_report(request: HttpRequest, report_id: UUID):
    user = require_auth(request)
    try:
        services.delete_report(report_id, user.id)
    except ValueError as e:
        raise HttpError(status_for(e), str(e))
    return 204, None
