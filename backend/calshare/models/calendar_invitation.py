from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from calshare.core.clock import utcnow
from calshare.models.types import UTCDateTime


class CalendarInvitation(SQLModel, table=True):
    """Shareable link granting a fixed role, bounded by expiry and use quota."""

    __tablename__ = "calendar_invitations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    calendar_id: UUID = Field(foreign_key="calendars.id", nullable=False, index=True)
    token: str = Field(max_length=128, unique=True, index=True)
    role: str = Field(default="viewer", max_length=32)
    expires_at: datetime = Field(sa_type=UTCDateTime, nullable=False)
    max_uses: Optional[int] = Field(default=None, nullable=True)
    use_count: int = Field(default=0, nullable=False)
    created_by: UUID = Field(foreign_key="users.id", nullable=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, nullable=False)
