"""Unit of work: the transaction scope a use case runs in.

A use case opens one unit, performs its reads and writes through the stores
the unit exposes, and calls ``commit()`` only on success. Leaving the block
without committing rolls everything back, so a failed multi-step mutation
never leaves a half-applied ownership or membership change behind.
"""

from __future__ import annotations

import abc
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from calshare.repositories.base import (
    CalendarStore,
    InvitationStore,
    MembershipStore,
    UserStore,
)
from calshare.repositories.errors import PersistenceError
from calshare.repositories.sql import (
    SqlCalendarStore,
    SqlInvitationStore,
    SqlMembershipStore,
    SqlUserStore,
)


class AbstractUnitOfWork(abc.ABC):
    """Contract for a transactional unit of work."""

    calendars: CalendarStore
    members: MembershipStore
    invitations: InvitationStore
    users: UserStore

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    @abc.abstractmethod
    async def commit(self) -> None:
        """Persist changes and finalize the transaction."""

    @abc.abstractmethod
    async def rollback(self) -> None:
        """Revert uncommitted changes."""


class SqlUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> SqlUnitOfWork:
        self.session = self._session_factory()
        self.calendars = SqlCalendarStore(self.session)
        self.members = SqlMembershipStore(self.session)
        self.invitations = SqlInvitationStore(self.session)
        self.users = SqlUserStore(self.session)
        return self

    async def __aexit__(self, *args) -> None:
        # Detach loaded rows so the rollback cannot expire what the caller still reads
        self.session.expunge_all()
        try:
            await super().__aexit__(*args)
        finally:
            await self.session.close()
            self.session = None

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError(str(exc)) from exc

    async def rollback(self) -> None:
        await self.session.rollback()


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]
