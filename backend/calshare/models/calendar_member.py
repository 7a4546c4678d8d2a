from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from calshare.core.clock import utcnow
from calshare.models.types import UTCDateTime


class CalendarMember(SQLModel, table=True):
    """Calendar membership with per-user role."""

    __tablename__ = "calendar_members"
    __table_args__ = (
        UniqueConstraint(
            "calendar_id", "user_id", name="uq_calendar_members_calendar_user"
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    calendar_id: UUID = Field(foreign_key="calendars.id", nullable=False, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    role: str = Field(default="viewer", max_length=32)
    invited_by: Optional[UUID] = Field(
        default=None, foreign_key="users.id", nullable=True
    )
    accepted_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime, nullable=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, nullable=False)

    @classmethod
    def create(
        cls,
        *,
        calendar_id: UUID,
        user_id: UUID,
        role: str,
        invited_by: Optional[UUID],
        accepted: bool = False,
    ) -> CalendarMember:
        now = utcnow()
        return cls(
            calendar_id=calendar_id,
            user_id=user_id,
            role=str(getattr(role, "value", role)),
            invited_by=invited_by,
            accepted_at=now if accepted else None,
            created_at=now,
            updated_at=now,
        )
