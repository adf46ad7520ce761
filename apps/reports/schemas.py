"""API Schemas for Reports app."""
from typing import Dict, List, Optional
from uuid import UUID
from datetime import date, datetime
from ninja import Schema

from apps.core.pagination import PageMetaOut
from apps.identity.schemas import UserSummaryOut


class ReportIn(Schema):
    reported_user_id: UUID
    type: str
    reason: str
    evidence: List[str] = []


class ReportUpdateIn(Schema):
    status: Optional[str] = None
    admin_notes: Optional[str] = None
    action_taken: Optional[str] = None


class ReportOut(Schema):
    id: UUID
    reporter_id: UUID
    reported_user_id: UUID
    type: str
    reason: str
    evidence: List[str]
    status: str
    admin_notes: str
    action_taken: str
    resolved_by_id: Optional[UUID] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    reporter: Optional[UserSummaryOut] = None
    reported_user: Optional[UserSummaryOut] = None


class ReportPageOut(Schema):
    items: List[ReportOut]
    pagination: PageMetaOut


class DailyCountOut(Schema):
    date: date
    count: int


class ReportStatsOut(Schema):
    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    daily: List[DailyCountOut]
