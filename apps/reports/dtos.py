"""DTOs for Reports app."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from apps.identity.dtos import UserSummaryDTO


@dataclass(frozen=True)
class ReportDTO:
    id: UUID
    reporter_id: UUID
    reported_user_id: UUID
    type: str
    reason: str
    evidence: List[str]
    status: str
    admin_notes: str
    action_taken: str
    resolved_by_id: Optional[UUID]
    resolved_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    reporter: Optional[UserSummaryDTO] = None
    reported_user: Optional[UserSummaryDTO] = None


@dataclass(frozen=True)
class DailyCountDTO:
    date: date
    count: int


@dataclass(frozen=True)
class ReportStatsDTO:
    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    daily: List[DailyCountDTO]
