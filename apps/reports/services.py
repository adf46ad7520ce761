"""Services for Reports app: filing reports and the moderation workflow."""
import logging
from datetime import date
from typing import List, Optional, Tuple

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.audit.audit_service import log_action, AuditAction
from apps.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from apps.core.pagination import PageMeta, paginate
from apps.identity.services import get_user_summaries, user_exists
from .models import Report, ReportStatus, ReportType, OPEN_STATUSES, CLOSED_STATUSES
from .dtos import DailyCountDTO, ReportDTO, ReportStatsDTO

logger = logging.getLogger(__name__)

SORT_FIELDS = ('created_at', 'updated_at', 'status', 'type')


def _to_dto(report: Report, users: Optional[dict] = None) -> ReportDTO:
    users = users or {}
    return ReportDTO(
        id=report.id,
        reporter_id=report.reporter_id,
        reported_user_id=report.reported_user_id,
        type=report.type,
        reason=report.reason,
        evidence=list(report.evidence or []),
        status=report.status,
        admin_notes=report.admin_notes,
        action_taken=report.action_taken,
        resolved_by_id=report.resolved_by_id,
        resolved_at=report.resolved_at,
        created_at=report.created_at,
        updated_at=report.updated_at,
        reporter=users.get(report.reporter_id),
        reported_user=users.get(report.reported_user_id),
    )


def _with_users(reports: List[Report]) -> List[ReportDTO]:
    users = get_user_summaries(
        {r.reporter_id for r in reports} | {r.reported_user_id for r in reports}
    )
    return [_to_dto(r, users) for r in reports]


def _choice(value: Optional[str], choices, label: str) -> Optional[str]:
    if not value:
        return None
    value = value.upper()
    if value not in choices.values:
        raise ValueError(f"Invalid {label}: {value}")
    return value


def _get(report_id) -> Report:
    try:
        return Report.objects.get(id=report_id)
    except Report.DoesNotExist:
        raise NotFoundError("Report not found")


def create_report(reporter_id, reported_user_id, report_type: str, reason: str,
                  evidence: Optional[List[str]] = None) -> ReportDTO:
    report_type = _choice(report_type, ReportType, 'report type')
    if report_type is None:
        raise ValueError("Report type is required")
    if not (reason or '').strip():
        raise ValueError("Reason is required")
    if not user_exists(reported_user_id, active_only=False):
        raise NotFoundError("Reported user not found")
    if reporter_id == reported_user_id:
        raise ValueError("You cannot report yourself")

    with transaction.atomic():
        # the reporter's row lock serializes their concurrent filings
        get_user_model().objects.select_for_update().filter(id=reporter_id).first()
        duplicate = Report.objects.filter(
            reporter_id=reporter_id,
            reported_user_id=reported_user_id,
            type=report_type,
            status__in=OPEN_STATUSES,
        ).exists()
        if duplicate:
            raise ConflictError("You already have an open report of this type against this user")

        report = Report.objects.create(
            reporter_id=reporter_id,
            reported_user_id=reported_user_id,
            type=report_type,
            reason=reason.strip(),
            evidence=evidence or [],
        )

    logger.info(f"Report {report.id} ({report_type}) filed by {reporter_id} against {reported_user_id}")
    return _with_users([report])[0]


def list_reports(
    status: Optional[str] = None,
    report_type: Optional[str] = None,
    sort_by: str = 'created_at',
    sort_order: str = 'desc',
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[ReportDTO], PageMeta]:
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"sort_by must be one of: {', '.join(SORT_FIELDS)}")
    qs = Report.objects.all()
    status = _choice(status, ReportStatus, 'status')
    if status:
        qs = qs.filter(status=status)
    report_type = _choice(report_type, ReportType, 'report type')
    if report_type:
        qs = qs.filter(type=report_type)
    ordering = sort_by if (sort_order or '').lower() == 'asc' else f'-{sort_by}'
    rows, meta = paginate(qs.order_by(ordering, '-created_at'), page, limit)
    return _with_users(rows), meta


def my_reports(reporter_id, page: int = 1, limit: int = 10) -> Tuple[List[ReportDTO], PageMeta]:
    rows, meta = paginate(Report.objects.filter(reporter_id=reporter_id).order_by('-created_at'), page, limit)
    return _with_users(rows), meta


def get_report(report_id, user_id, as_admin: bool = False) -> ReportDTO:
    report = _get(report_id)
    if not as_admin and report.reporter_id != user_id:
        raise ForbiddenError("You can only view your own reports")
    return _with_users([report])[0]


def update_report(report_id, admin_id, status: Optional[str] = None,
                  admin_notes: Optional[str] = None, action_taken: Optional[str] = None) -> ReportDTO:
    """Moderation update. Closing a report stamps who closed it and when."""
    report = _get(report_id)
    old_status = report.status
    status = _choice(status, ReportStatus, 'status')
    if status:
        report.status = status
        if status in CLOSED_STATUSES:
            report.resolved_by_id = admin_id
            report.resolved_at = timezone.now()
    if admin_notes is not None:
        report.admin_notes = admin_notes
    if action_taken is not None:
        report.action_taken = action_taken
    report.save()

    if report.status != old_status:
        logger.info(f"Report {report.id}: {old_status} -> {report.status} by {admin_id}")
        log_action(
            action=AuditAction.REPORT_STATUS_CHANGED,
            target_type="Report",
            target_id=report.id,
            target_label=f"{report.type} report on {report.reported_user_id}",
            performed_by=admin_id,
            context={"from": old_status, "to": report.status, "action_taken": report.action_taken},
        )
    return _with_users([report])[0]


def delete_report(report_id, user_id) -> None:
    """Reporters may withdraw a report while it is still pending."""
    report = _get(report_id)
    if report.reporter_id != user_id:
        raise ForbiddenError("You can only delete your own reports")
    if report.status != ReportStatus.PENDING:
        raise ValueError("Only pending reports can be deleted")
    report.delete()
    logger.info(f"Report {report_id} withdrawn by {user_id}")


def report_stats(start_date: Optional[date] = None, end_date: Optional[date] = None) -> ReportStatsDTO:
    qs = Report.objects.all()
    if start_date:
        qs = qs.filter(created_at__date__gte=start_date)
    if end_date:
        qs = qs.filter(created_at__date__lte=end_date)

    by_status = {s: 0 for s in ReportStatus.values}
    for row in qs.values('status').annotate(count=Count('id')).order_by():
        by_status[row['status']] = row['count']
    by_type = {t: 0 for t in ReportType.values}
    for row in qs.values('type').annotate(count=Count('id')).order_by():
        by_type[row['type']] = row['count']
    daily = [
        DailyCountDTO(date=row['day'], count=row['count'])
        for row in qs.annotate(day=TruncDate('created_at')).values('day')
        .annotate(count=Count('id')).order_by('day')
    ]
    return ReportStatsDTO(total=qs.count(), by_status=by_status, by_type=by_type, daily=daily)
