"""Effective-role resolution for a caller on a calendar.

This is the only place that decides whether a user is the owner, a member
(with which role) or nobody. Use cases never compare ``owner_id`` themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from calshare.domain.roles import CalendarRole, MemberRole, can_manage_members
from calshare.models import Calendar, CalendarMember
from calshare.repositories.unit_of_work import AbstractUnitOfWork
from calshare.services.errors import forbidden, not_found
from calshare.services.result import Err, Ok, Result


@dataclass(frozen=True)
class CalendarAccess:
    calendar: Calendar
    role: CalendarRole
    membership: Optional[CalendarMember] = None

    @property
    def is_owner(self) -> bool:
        return self.role is CalendarRole.OWNER


async def load_live_calendar(
    uow: AbstractUnitOfWork, calendar_id: UUID
) -> Result[Calendar]:
    calendar = await uow.calendars.get(calendar_id)
    if calendar is None or calendar.is_deleted:
        return Err(not_found("Calendar"))
    return Ok(calendar)


async def resolve_operator_role(
    uow: AbstractUnitOfWork, calendar: Calendar, user_id: UUID
) -> Result[CalendarAccess]:
    if calendar.owner_id == user_id:
        return Ok(CalendarAccess(calendar, CalendarRole.OWNER))

    membership = await uow.members.get_for_user(user_id, calendar.id)
    if membership is None:
        return Err(forbidden("You do not have access to this calendar"))
    return Ok(CalendarAccess(calendar, CalendarRole(membership.role), membership))


async def require_member_manager(
    uow: AbstractUnitOfWork,
    calendar: Calendar,
    operator_id: UUID,
    *,
    action: str,
    granting: Optional[MemberRole] = None,
) -> Result[CalendarAccess]:
    """Resolve the operator and require admin rank; admin grants are owner-only."""
    resolved = await resolve_operator_role(uow, calendar, operator_id)
    if not resolved.ok:
        return resolved

    access = resolved.value
    if not can_manage_members(access.role):
        return Err(forbidden(f"You do not have permission to {action}"))
    if granting is MemberRole.ADMIN and not access.is_owner:
        return Err(forbidden("Only the calendar owner can grant admin"))
    return resolved


async def resolve_access(
    uow: AbstractUnitOfWork, calendar_id: UUID, user_id: UUID
) -> Result[CalendarAccess]:
    """Load a live calendar and the caller's effective role on it."""
    loaded = await load_live_calendar(uow, calendar_id)
    if not loaded.ok:
        return loaded
    return await resolve_operator_role(uow, loaded.value, user_id)
