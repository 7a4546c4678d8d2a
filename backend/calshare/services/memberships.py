"""Membership use cases: list, add, change role, remove, leave."""

from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from calshare.domain.roles import CalendarRole
from calshare.models import Calendar, CalendarMember, User
from calshare.repositories.errors import DuplicateRecordError
from calshare.repositories.unit_of_work import UnitOfWorkFactory
from calshare.schemas import (
    CalendarMemberCreate,
    CalendarMemberRead,
    CalendarMemberUpdate,
    MemberUserRead,
)
from calshare.services.access import (
    load_live_calendar,
    require_member_manager,
    resolve_access,
)
from calshare.services.errors import conflict, database_error, forbidden, not_found
from calshare.services.result import Err, Ok, Result, persistence_guard

logger = logging.getLogger(__name__)


def serialize_member(member: CalendarMember, user: User) -> CalendarMemberRead:
    return CalendarMemberRead(
        id=str(member.id),
        user_id=member.user_id,
        role=CalendarRole(member.role),
        user=MemberUserRead.model_validate(user),
        invited_by=member.invited_by,
        accepted_at=member.accepted_at,
        created_at=member.created_at,
    )


def serialize_owner(calendar: Calendar, owner: User) -> CalendarMemberRead:
    """The owner has no membership row; synthesize one for listings."""
    return CalendarMemberRead(
        id=f"owner-{owner.id}",
        user_id=owner.id,
        role=CalendarRole.OWNER,
        user=MemberUserRead.model_validate(owner),
        invited_by=None,
        accepted_at=calendar.created_at,
        created_at=calendar.created_at,
    )


class MembershipService:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @persistence_guard
    async def get_members(
        self, calendar_id: UUID, user_id: UUID
    ) -> Result[List[CalendarMemberRead]]:
        async with self._uow_factory() as uow:
            resolved = await resolve_access(uow, calendar_id, user_id)
            if not resolved.ok:
                return resolved
            calendar = resolved.value.calendar

            owner = await uow.users.get(calendar.owner_id)
            if owner is None:
                logger.error("Owner %s of calendar %s is missing", calendar.owner_id, calendar.id)
                return Err(database_error("Calendar owner not found"))

            rows = await uow.members.list_with_users(calendar_id)

            members = [serialize_owner(calendar, owner)]
            members.extend(serialize_member(member, user) for member, user in rows)
            return Ok(members)

    @persistence_guard
    async def add_member(
        self, calendar_id: UUID, requester_id: UUID, payload: CalendarMemberCreate
    ) -> Result[CalendarMemberRead]:
        async with self._uow_factory() as uow:
            loaded = await load_live_calendar(uow, calendar_id)
            if not loaded.ok:
                return loaded
            calendar = loaded.value

            authorized = await require_member_manager(
                uow, calendar, requester_id, action="add members", granting=payload.role
            )
            if not authorized.ok:
                return authorized

            target = await uow.users.get_by_email(payload.email)
            if target is None:
                return Err(not_found("User"))
            if target.id == calendar.owner_id:
                return Err(conflict("The calendar owner cannot be added as a member"))

            existing = await uow.members.get_for_user(target.id, calendar_id)
            if existing is not None:
                return Err(conflict("User is already a member of this calendar"))

            # Direct adds skip the acceptance step
            member = CalendarMember.create(
                calendar_id=calendar_id,
                user_id=target.id,
                role=payload.role,
                invited_by=requester_id,
                accepted=True,
            )
            try:
                await uow.members.add(member)
            except DuplicateRecordError:
                return Err(conflict("User is already a member of this calendar"))
            await uow.commit()

        logger.info(
            "User %s added %s to calendar %s as %s",
            requester_id, target.id, calendar_id, member.role,
        )
        return Ok(serialize_member(member, target))

    @persistence_guard
    async def update_member_role(
        self,
        calendar_id: UUID,
        target_user_id: UUID,
        operator_id: UUID,
        payload: CalendarMemberUpdate,
    ) -> Result[None]:
        async with self._uow_factory() as uow:
            loaded = await load_live_calendar(uow, calendar_id)
            if not loaded.ok:
                return loaded
            calendar = loaded.value

            if target_user_id == calendar.owner_id:
                return Err(forbidden("The owner's role cannot be changed"))

            authorized = await require_member_manager(
                uow, calendar, operator_id, action="change member roles", granting=payload.role
            )
            if not authorized.ok:
                return authorized

            # Re-resolve by (user, calendar) so a member of another calendar never matches
            target = await uow.members.get_for_user(target_user_id, calendar_id)
            if target is None:
                return Err(not_found("Member"))

            await uow.members.update_role(target.id, payload.role.value)
            await uow.commit()

        logger.info(
            "User %s changed role of %s on calendar %s to %s",
            operator_id, target_user_id, calendar_id, payload.role.value,
        )
        return Ok(None)

    @persistence_guard
    async def remove_member(
        self, calendar_id: UUID, target_user_id: UUID, operator_id: UUID
    ) -> Result[None]:
        async with self._uow_factory() as uow:
            loaded = await load_live_calendar(uow, calendar_id)
            if not loaded.ok:
                return loaded
            calendar = loaded.value

            if target_user_id == calendar.owner_id:
                return Err(forbidden("The owner cannot be removed"))

            authorized = await require_member_manager(
                uow, calendar, operator_id, action="remove members"
            )
            if not authorized.ok:
                return authorized

            target = await uow.members.get_for_user(target_user_id, calendar_id)
            if target is None:
                return Err(not_found("Member"))

            await uow.members.delete(target.id)
            await uow.commit()

        logger.info(
            "User %s removed %s from calendar %s", operator_id, target_user_id, calendar_id
        )
        return Ok(None)

    @persistence_guard
    async def leave_calendar(self, calendar_id: UUID, user_id: UUID) -> Result[None]:
        async with self._uow_factory() as uow:
            loaded = await load_live_calendar(uow, calendar_id)
            if not loaded.ok:
                return loaded

            if loaded.value.owner_id == user_id:
                return Err(
                    forbidden(
                        "The owner cannot leave the calendar; transfer ownership first"
                    )
                )

            membership = await uow.members.get_for_user(user_id, calendar_id)
            if membership is None:
                return Err(not_found("Membership"))

            await uow.members.delete(membership.id)
            await uow.commit()

        logger.info("User %s left calendar %s", user_id, calendar_id)
        return Ok(None)
