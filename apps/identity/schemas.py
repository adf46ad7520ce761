"""
API Schemas for Identity app.
"""
from typing import List, Optional
from uuid import UUID
from datetime import datetime
from ninja import Schema


class RegisterIn(Schema):
    username: str
    email: str
    password: str
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None


class LoginIn(Schema):
    username: str
    password: str


class RefreshIn(Schema):
    refresh_token: Optional[str] = None


class ProfileUpdateIn(Schema):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None


class UserAdminUpdateIn(Schema):
    role: Optional[str] = None
    is_active: Optional[bool] = None


class UserOut(Schema):
    id: UUID
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    avatar: str
    is_active: bool
    permissions: List[str]


class UserSummaryOut(Schema):
    id: UUID
    username: str
    display_name: str
    avatar: str
    role: str
    is_online: bool
    last_seen: Optional[datetime] = None


class TokenResponse(Schema):
    success: bool
    user: Optional[UserOut] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    message: Optional[str] = None
