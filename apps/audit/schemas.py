from typing import Any, List, Optional
from uuid import UUID
from datetime import datetime
from ninja import Schema

from apps.core.pagination import PageMetaOut


class AuditLogOut(Schema):
    id: UUID
    action: str
    target_type: str
    target_id: UUID
    target_label: str
    performed_by_id: Optional[UUID] = None
    performed_by_name: Optional[str] = None
    performed_at: datetime
    context: Any


class AuditLogPageOut(Schema):
    items: List[AuditLogOut]
    pagination: PageMetaOut
