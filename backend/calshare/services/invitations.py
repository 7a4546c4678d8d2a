"""Invitation-link use cases.

Links are created, listed and revoked by admins or the owner. Anyone may
look up a consumable link; accepting one requires an authenticated caller
and spends one use atomically before anything else is checked.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, List, Optional
from uuid import UUID

from calshare.core.clock import utcnow
from calshare.core.config import settings
from calshare.core.security import generate_invitation_token, mask_token
from calshare.domain.roles import InvitationRole
from calshare.models import CalendarInvitation, CalendarMember
from calshare.repositories.errors import DuplicateRecordError
from calshare.repositories.unit_of_work import UnitOfWorkFactory
from calshare.schemas import (
    InvitationAccepted,
    InvitationCreate,
    InvitationCreated,
    InvitationInfo,
    InvitationListItem,
)
from calshare.services.access import load_live_calendar, require_member_manager
from calshare.services.errors import conflict, database_error, not_found
from calshare.services.result import Err, Ok, Result, persistence_guard

logger = logging.getLogger(__name__)


def build_invitation_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/invite/{token}"


class InvitationService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        base_url: Optional[str] = None,
        token_factory: Callable[[], str] = generate_invitation_token,
        default_expire_days: Optional[int] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._base_url = base_url or settings.FRONTEND_URL
        self._token_factory = token_factory
        self._default_expire_days = (
            default_expire_days or settings.INVITATION_DEFAULT_EXPIRE_DAYS
        )

    @persistence_guard
    async def create_invitation(
        self, calendar_id: UUID, requester_id: UUID, payload: InvitationCreate
    ) -> Result[InvitationCreated]:
        async with self._uow_factory() as uow:
            loaded = await load_live_calendar(uow, calendar_id)
            if not loaded.ok:
                return loaded

            authorized = await require_member_manager(
                uow, loaded.value, requester_id, action="create invitation links"
            )
            if not authorized.ok:
                return authorized

            now = utcnow()
            expires_in_days = payload.expires_in_days or self._default_expire_days
            invitation = CalendarInvitation(
                calendar_id=calendar_id,
                token=self._token_factory(),
                role=payload.role.value,
                expires_at=now + timedelta(days=expires_in_days),
                max_uses=payload.max_uses,
                use_count=0,
                created_by=requester_id,
                created_at=now,
            )
            await uow.invitations.add(invitation)
            await uow.commit()

        logger.info(
            "User %s created %s invitation %s for calendar %s (max_uses=%s)",
            requester_id, invitation.role, invitation.id, calendar_id, invitation.max_uses,
        )
        return Ok(
            InvitationCreated(
                id=invitation.id,
                token=invitation.token,
                url=build_invitation_url(self._base_url, invitation.token),
                role=InvitationRole(invitation.role),
                expires_at=invitation.expires_at,
                max_uses=invitation.max_uses,
            )
        )

    @persistence_guard
    async def get_invitations(
        self, calendar_id: UUID, user_id: UUID
    ) -> Result[List[InvitationListItem]]:
        async with self._uow_factory() as uow:
            loaded = await load_live_calendar(uow, calendar_id)
            if not loaded.ok:
                return loaded

            authorized = await require_member_manager(
                uow, loaded.value, user_id, action="view invitation links"
            )
            if not authorized.ok:
                return authorized

            invitations = await uow.invitations.list_for_calendar(calendar_id)
            return Ok(
                [
                    InvitationListItem(
                        id=invitation.id,
                        token_preview=mask_token(invitation.token),
                        role=InvitationRole(invitation.role),
                        expires_at=invitation.expires_at,
                        max_uses=invitation.max_uses,
                        use_count=invitation.use_count,
                        created_at=invitation.created_at,
                    )
                    for invitation in invitations
                ]
            )

    @persistence_guard
    async def revoke_invitation(
        self, calendar_id: UUID, invitation_id: UUID, user_id: UUID
    ) -> Result[None]:
        async with self._uow_factory() as uow:
            loaded = await load_live_calendar(uow, calendar_id)
            if not loaded.ok:
                return loaded

            authorized = await require_member_manager(
                uow, loaded.value, user_id, action="revoke invitation links"
            )
            if not authorized.ok:
                return authorized

            # The invitation must belong to the calendar named in the path
            invitation = await uow.invitations.get(invitation_id)
            if invitation is None or invitation.calendar_id != calendar_id:
                return Err(not_found("Invitation"))

            await uow.invitations.delete(invitation_id)
            await uow.commit()

        logger.info(
            "User %s revoked invitation %s of calendar %s", user_id, invitation_id, calendar_id
        )
        return Ok(None)

    @persistence_guard
    async def get_invitation_info(self, token: str) -> Result[InvitationInfo]:
        async with self._uow_factory() as uow:
            # Expired, exhausted and unknown tokens are indistinguishable
            invitation = await uow.invitations.get_consumable(token, utcnow())
            if invitation is None:
                return Err(not_found("Invitation"))

            loaded = await load_live_calendar(uow, invitation.calendar_id)
            if not loaded.ok:
                return loaded
            calendar = loaded.value

            owner = await uow.users.get(calendar.owner_id)
            if owner is None:
                logger.error("Owner %s of calendar %s is missing", calendar.owner_id, calendar.id)
                return Err(database_error("Calendar owner not found"))

            return Ok(
                InvitationInfo(
                    calendar_name=calendar.name,
                    calendar_color=calendar.color,
                    role=InvitationRole(invitation.role),
                    expires_at=invitation.expires_at,
                    owner_name=owner.name,
                )
            )

    @persistence_guard
    async def accept_invitation(
        self, token: str, user_id: UUID
    ) -> Result[InvitationAccepted]:
        async with self._uow_factory() as uow:
            invitation = await uow.invitations.consume(token, utcnow())
            if invitation is None:
                return Err(not_found("Invitation"))
            # The spent use stands even when the join below is rejected; no refund
            await uow.commit()

            loaded = await load_live_calendar(uow, invitation.calendar_id)
            if not loaded.ok:
                return loaded
            calendar = loaded.value

            if calendar.owner_id == user_id:
                return Err(conflict("You already own this calendar"))

            existing = await uow.members.get_for_user(user_id, calendar.id)
            if existing is not None:
                return Err(conflict("You are already a member of this calendar"))

            member = CalendarMember.create(
                calendar_id=calendar.id,
                user_id=user_id,
                role=invitation.role,
                invited_by=invitation.created_by,
                accepted=True,
            )
            try:
                await uow.members.add(member)
            except DuplicateRecordError:
                return Err(conflict("You are already a member of this calendar"))
            await uow.commit()

        logger.info(
            "User %s joined calendar %s via invitation %s (use %s/%s)",
            user_id, calendar.id, invitation.id, invitation.use_count,
            invitation.max_uses if invitation.max_uses is not None else "unlimited",
        )
        return Ok(InvitationAccepted(calendar_id=calendar.id))
