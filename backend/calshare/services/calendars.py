"""Calendar aggregate use cases: create, list, detail, update, soft delete."""

from __future__ import annotations

import logging
from typing import Dict, List
from uuid import UUID

from calshare.domain.roles import CalendarRole, can_manage_members
from calshare.models import DEFAULT_CALENDAR_COLOR, Calendar, User
from calshare.repositories.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from calshare.schemas import CalendarCreate, CalendarOwnerRead, CalendarRead, CalendarUpdate
from calshare.services.access import load_live_calendar, resolve_access
from calshare.services.errors import database_error, forbidden, not_found
from calshare.services.result import Err, Ok, Result, persistence_guard

logger = logging.getLogger(__name__)


def serialize_calendar(
    calendar: Calendar, *, role: CalendarRole, owner: User, member_count: int
) -> CalendarRead:
    return CalendarRead(
        id=calendar.id,
        name=calendar.name,
        color=calendar.color,
        role=role,
        member_count=member_count,
        owner=CalendarOwnerRead.model_validate(owner),
        created_at=calendar.created_at,
        updated_at=calendar.updated_at,
    )


async def _describe(
    uow: AbstractUnitOfWork, calendar: Calendar, role: CalendarRole
) -> Result[CalendarRead]:
    owner = await uow.users.get(calendar.owner_id)
    if owner is None:
        logger.error("Owner %s of calendar %s is missing", calendar.owner_id, calendar.id)
        return Err(database_error("Calendar owner not found"))
    # +1 for the owner, who has no membership row
    member_count = await uow.members.count(calendar.id) + 1
    return Ok(serialize_calendar(calendar, role=role, owner=owner, member_count=member_count))


class CalendarService:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @persistence_guard
    async def create_calendar(
        self, user_id: UUID, payload: CalendarCreate
    ) -> Result[CalendarRead]:
        async with self._uow_factory() as uow:
            owner = await uow.users.get(user_id)
            if owner is None:
                return Err(not_found("User"))

            calendar = Calendar(
                owner_id=user_id,
                name=payload.name,
                color=payload.color or DEFAULT_CALENDAR_COLOR,
            )
            await uow.calendars.add(calendar)
            await uow.commit()

        logger.info("User %s created calendar %s", user_id, calendar.id)
        return Ok(
            serialize_calendar(
                calendar, role=CalendarRole.OWNER, owner=owner, member_count=1
            )
        )

    @persistence_guard
    async def get_calendars(self, user_id: UUID) -> Result[List[CalendarRead]]:
        async with self._uow_factory() as uow:
            calendars = await uow.calendars.list_accessible(user_id)
            roles: Dict[UUID, str] = {
                member.calendar_id: member.role
                for member in await uow.members.list_for_user(user_id)
            }

            owners: Dict[UUID, User] = {}
            result: List[CalendarRead] = []
            for calendar in calendars:
                if calendar.owner_id == user_id:
                    role = CalendarRole.OWNER
                elif calendar.id in roles:
                    role = CalendarRole(roles[calendar.id])
                else:
                    continue

                owner = owners.get(calendar.owner_id)
                if owner is None:
                    owner = await uow.users.get(calendar.owner_id)
                    if owner is None:
                        logger.warning(
                            "Skipping calendar %s: owner %s is missing",
                            calendar.id, calendar.owner_id,
                        )
                        continue
                    owners[owner.id] = owner

                member_count = await uow.members.count(calendar.id) + 1
                result.append(
                    serialize_calendar(
                        calendar, role=role, owner=owner, member_count=member_count
                    )
                )

        return Ok(result)

    @persistence_guard
    async def get_calendar(self, calendar_id: UUID, user_id: UUID) -> Result[CalendarRead]:
        async with self._uow_factory() as uow:
            resolved = await resolve_access(uow, calendar_id, user_id)
            if not resolved.ok:
                return resolved
            return await _describe(uow, resolved.value.calendar, resolved.value.role)

    @persistence_guard
    async def update_calendar(
        self, calendar_id: UUID, user_id: UUID, payload: CalendarUpdate
    ) -> Result[CalendarRead]:
        async with self._uow_factory() as uow:
            resolved = await resolve_access(uow, calendar_id, user_id)
            if not resolved.ok:
                return resolved
            access = resolved.value
            if not can_manage_members(access.role):
                return Err(forbidden("You do not have permission to change calendar settings"))

            calendar = access.calendar
            update_data = payload.model_dump(exclude_unset=True, exclude_none=True)
            for field, value in update_data.items():
                setattr(calendar, field, value)
            calendar.touch()
            await uow.calendars.update(calendar)

            described = await _describe(uow, calendar, access.role)
            if described.ok:
                await uow.commit()
            return described

    @persistence_guard
    async def delete_calendar(self, calendar_id: UUID, user_id: UUID) -> Result[None]:
        async with self._uow_factory() as uow:
            loaded = await load_live_calendar(uow, calendar_id)
            if not loaded.ok:
                return loaded
            calendar = loaded.value

            if calendar.owner_id != user_id:
                return Err(forbidden("Only the calendar owner can delete it"))

            calendar.soft_delete()
            await uow.calendars.update(calendar)
            await uow.commit()

        logger.info("User %s deleted calendar %s", user_id, calendar_id)
        return Ok(None)
