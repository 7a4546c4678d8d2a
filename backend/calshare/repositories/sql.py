"""SQLModel-backed store adapters.

All adapters of one unit of work share its ``AsyncSession``, so their
statements run in the same transaction.
"""

from __future__ import annotations

import functools
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import col, func, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from calshare.core.clock import utcnow
from calshare.models import Calendar, CalendarInvitation, CalendarMember, User
from calshare.repositories.errors import DuplicateRecordError, PersistenceError


def translate_errors(func):
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except IntegrityError as exc:
            raise DuplicateRecordError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    return wrapper


def calendar_access_condition(user_id: UUID):
    member_subquery = select(CalendarMember.calendar_id).where(
        CalendarMember.user_id == user_id
    )
    return or_(
        col(Calendar.owner_id) == user_id,
        col(Calendar.id).in_(member_subquery),
    )


class SqlCalendarStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @translate_errors
    async def add(self, calendar: Calendar) -> None:
        self.session.add(calendar)
        await self.session.flush()

    @translate_errors
    async def get(self, calendar_id: UUID) -> Optional[Calendar]:
        return await self.session.get(Calendar, calendar_id)

    @translate_errors
    async def list_accessible(self, user_id: UUID) -> Sequence[Calendar]:
        statement = (
            select(Calendar)
            .where(col(Calendar.deleted_at).is_(None))
            .where(calendar_access_condition(user_id))
            .order_by(col(Calendar.created_at))
        )
        result = await self.session.exec(statement)
        return result.all()

    @translate_errors
    async def update(self, calendar: Calendar) -> None:
        self.session.add(calendar)
        await self.session.flush()

    @translate_errors
    async def transfer_owner(
        self, calendar_id: UUID, expected_owner_id: UUID, new_owner_id: UUID
    ) -> bool:
        statement = (
            update(Calendar)
            .where(col(Calendar.id) == calendar_id)
            .where(col(Calendar.owner_id) == expected_owner_id)
            .values(owner_id=new_owner_id, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.exec(statement)
        return result.rowcount == 1


class SqlMembershipStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @translate_errors
    async def add(self, member: CalendarMember) -> None:
        self.session.add(member)
        await self.session.flush()

    @translate_errors
    async def get_for_user(
        self, user_id: UUID, calendar_id: UUID
    ) -> Optional[CalendarMember]:
        statement = select(CalendarMember).where(
            CalendarMember.user_id == user_id,
            CalendarMember.calendar_id == calendar_id,
        )
        result = await self.session.exec(statement)
        return result.one_or_none()

    @translate_errors
    async def list_with_users(
        self, calendar_id: UUID
    ) -> Sequence[tuple[CalendarMember, User]]:
        statement = (
            select(CalendarMember, User)
            .join(User, col(User.id) == col(CalendarMember.user_id))
            .where(CalendarMember.calendar_id == calendar_id)
            .order_by(col(CalendarMember.created_at))
        )
        result = await self.session.exec(statement)
        return [(member, user) for member, user in result.all()]

    @translate_errors
    async def list_for_user(self, user_id: UUID) -> Sequence[CalendarMember]:
        statement = select(CalendarMember).where(CalendarMember.user_id == user_id)
        result = await self.session.exec(statement)
        return result.all()

    @translate_errors
    async def count(self, calendar_id: UUID) -> int:
        statement = (
            select(func.count())
            .select_from(CalendarMember)
            .where(CalendarMember.calendar_id == calendar_id)
        )
        result = await self.session.exec(statement)
        return result.one()

    @translate_errors
    async def update_role(self, member_id: UUID, role: str) -> None:
        statement = (
            update(CalendarMember)
            .where(col(CalendarMember.id) == member_id)
            .values(role=role, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.exec(statement)

    @translate_errors
    async def delete(self, member_id: UUID) -> None:
        statement = (
            delete(CalendarMember)
            .where(col(CalendarMember.id) == member_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.exec(statement)


class SqlInvitationStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _consumable(token: str, now: datetime):
        return (
            col(CalendarInvitation.token) == token,
            col(CalendarInvitation.expires_at) > now,
            or_(
                col(CalendarInvitation.max_uses).is_(None),
                col(CalendarInvitation.use_count) < col(CalendarInvitation.max_uses),
            ),
        )

    @translate_errors
    async def add(self, invitation: CalendarInvitation) -> None:
        self.session.add(invitation)
        await self.session.flush()

    @translate_errors
    async def get(self, invitation_id: UUID) -> Optional[CalendarInvitation]:
        return await self.session.get(CalendarInvitation, invitation_id)

    @translate_errors
    async def get_consumable(
        self, token: str, now: datetime
    ) -> Optional[CalendarInvitation]:
        statement = select(CalendarInvitation).where(*self._consumable(token, now))
        result = await self.session.exec(statement)
        return result.one_or_none()

    @translate_errors
    async def list_for_calendar(
        self, calendar_id: UUID
    ) -> Sequence[CalendarInvitation]:
        statement = (
            select(CalendarInvitation)
            .where(CalendarInvitation.calendar_id == calendar_id)
            .order_by(col(CalendarInvitation.created_at))
        )
        result = await self.session.exec(statement)
        return result.all()

    @translate_errors
    async def consume(
        self, token: str, now: datetime
    ) -> Optional[CalendarInvitation]:
        statement = (
            update(CalendarInvitation)
            .where(*self._consumable(token, now))
            .values(use_count=col(CalendarInvitation.use_count) + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.exec(statement)
        if result.rowcount != 1:
            return None

        # The row is write-locked by the update until commit
        refreshed = await self.session.exec(
            select(CalendarInvitation)
            .where(CalendarInvitation.token == token)
            .execution_options(populate_existing=True)
        )
        return refreshed.one()

    @translate_errors
    async def delete(self, invitation_id: UUID) -> None:
        statement = (
            delete(CalendarInvitation)
            .where(col(CalendarInvitation.id) == invitation_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.exec(statement)


class SqlUserStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @translate_errors
    async def add(self, user: User) -> None:
        user.email = user.email.lower()
        self.session.add(user)
        await self.session.flush()

    @translate_errors
    async def get(self, user_id: UUID) -> Optional[User]:
        return await self.session.get(User, user_id)

    @translate_errors
    async def get_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.exec(statement)
        return result.one_or_none()
