"""DTOs for Identity app."""
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID
from typing import Optional, List


@dataclass(frozen=True)
class UserDTO:
    id: UUID
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    avatar: str
    is_active: bool
    permissions: List[str]


@dataclass(frozen=True)
class UserSummaryDTO:
    """Public view of a user, safe to embed in other apps' responses."""
    id: UUID
    username: str
    display_name: str
    avatar: str
    role: str
    is_online: bool
    is_active: bool
    last_seen: Optional[datetime] = None
