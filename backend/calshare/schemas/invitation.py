from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from calshare.domain.roles import InvitationRole


class InvitationCreate(BaseModel):
    # admin can never be granted through a link
    role: InvitationRole
    expires_in_days: Optional[int] = Field(default=None, ge=1, le=30)
    max_uses: Optional[int] = Field(default=None, ge=1, le=100)


class InvitationCreated(BaseModel):
    """Returned once at creation; the only response carrying the full token."""

    id: UUID
    token: str
    url: str
    role: InvitationRole
    expires_at: datetime
    max_uses: Optional[int] = None


class InvitationListItem(BaseModel):
    id: UUID
    token_preview: str
    role: InvitationRole
    expires_at: datetime
    max_uses: Optional[int] = None
    use_count: int
    created_at: datetime


class InvitationInfo(BaseModel):
    """Public view of a consumable invitation."""

    calendar_name: str
    calendar_color: str
    role: InvitationRole
    expires_at: datetime
    owner_name: str


class InvitationAccepted(BaseModel):
    calendar_id: UUID
