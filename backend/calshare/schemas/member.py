from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr

from calshare.domain.roles import CalendarRole, MemberRole


class MemberUserRead(BaseModel):
    """Public user fields embedded in membership responses."""

    id: UUID
    name: str
    email: str
    picture: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CalendarMemberRead(BaseModel):
    # "owner-<user id>" for the synthesized owner entry
    id: str
    user_id: UUID
    role: CalendarRole
    user: MemberUserRead
    invited_by: Optional[UUID] = None
    accepted_at: Optional[datetime] = None
    created_at: datetime


class CalendarMemberCreate(BaseModel):
    email: EmailStr
    role: MemberRole


class CalendarMemberUpdate(BaseModel):
    role: MemberRole


class OwnershipTransfer(BaseModel):
    new_owner_id: UUID
