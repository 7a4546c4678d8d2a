from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from calshare.core.clock import utcnow
from calshare.models.types import UTCDateTime

DEFAULT_CALENDAR_COLOR = "#3B82F6"


class Calendar(SQLModel, table=True):
    """A shared calendar; its owner is implicit and never a member row."""

    __tablename__ = "calendars"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    owner_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    name: str = Field(max_length=100)
    color: str = Field(default=DEFAULT_CALENDAR_COLOR, max_length=16)
    deleted_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime, nullable=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, nullable=False)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def touch(self) -> None:
        self.updated_at = utcnow()

    def soft_delete(self) -> None:
        self.deleted_at = utcnow()
        self.touch()
