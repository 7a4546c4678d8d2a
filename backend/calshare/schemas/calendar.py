from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from calshare.domain.roles import CalendarRole

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CalendarCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)


class CalendarUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)


class CalendarOwnerRead(BaseModel):
    id: UUID
    name: str
    picture: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CalendarRead(BaseModel):
    id: UUID
    name: str
    color: str
    role: CalendarRole
    member_count: int
    owner: CalendarOwnerRead
    created_at: datetime
    updated_at: datetime
