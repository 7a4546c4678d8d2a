"""Ownership transfer: the one use case that rewrites calendar and membership together.

The three writes (drop the new owner's row, add the former owner as admin,
swap ``owner_id``) share one unit of work. The owner swap is a
compare-and-set on the previous owner, so a transfer racing another
ownership change rolls back instead of leaving two owners behind.
"""

from __future__ import annotations

import logging
from uuid import UUID

from calshare.domain.roles import MemberRole
from calshare.models import CalendarMember
from calshare.repositories.errors import DuplicateRecordError
from calshare.repositories.unit_of_work import UnitOfWorkFactory
from calshare.schemas import OwnershipTransfer
from calshare.services.access import load_live_calendar
from calshare.services.errors import conflict, forbidden, not_found
from calshare.services.result import Err, Ok, Result, persistence_guard

logger = logging.getLogger(__name__)


class OwnershipService:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @persistence_guard
    async def transfer_ownership(
        self, calendar_id: UUID, current_owner_id: UUID, payload: OwnershipTransfer
    ) -> Result[None]:
        new_owner_id = payload.new_owner_id

        async with self._uow_factory() as uow:
            loaded = await load_live_calendar(uow, calendar_id)
            if not loaded.ok:
                return loaded
            calendar = loaded.value

            if calendar.owner_id != current_owner_id:
                return Err(forbidden("Only the calendar owner can transfer ownership"))
            if new_owner_id == current_owner_id:
                return Err(forbidden("Ownership cannot be transferred to yourself"))

            candidate = await uow.members.get_for_user(new_owner_id, calendar_id)
            if candidate is None:
                return Err(not_found("Membership of the new owner"))
            if candidate.role != MemberRole.ADMIN.value:
                return Err(forbidden("Ownership can only be transferred to an admin"))

            await uow.members.delete(candidate.id)
            try:
                await uow.members.add(
                    CalendarMember.create(
                        calendar_id=calendar_id,
                        user_id=current_owner_id,
                        role=MemberRole.ADMIN,
                        invited_by=new_owner_id,
                        accepted=True,
                    )
                )
            except DuplicateRecordError:
                return Err(conflict("Calendar membership changed concurrently"))

            swapped = await uow.calendars.transfer_owner(
                calendar_id, current_owner_id, new_owner_id
            )
            if not swapped:
                return Err(conflict("Calendar ownership changed concurrently"))

            await uow.commit()

        logger.info(
            "Ownership of calendar %s transferred from %s to %s",
            calendar_id, current_owner_id, new_owner_id,
        )
        return Ok(None)
