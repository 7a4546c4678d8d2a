"""Store contracts used by the service layer.

Adapters implement these protocols; use cases only ever see the protocols.
Every method may raise ``PersistenceError``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence
from uuid import UUID

from calshare.models import Calendar, CalendarInvitation, CalendarMember, User


class CalendarStore(Protocol):
    async def add(self, calendar: Calendar) -> None: ...

    async def get(self, calendar_id: UUID) -> Optional[Calendar]: ...

    async def list_accessible(self, user_id: UUID) -> Sequence[Calendar]:
        """Live calendars the user owns or is a member of, oldest first."""
        ...

    async def update(self, calendar: Calendar) -> None: ...

    async def transfer_owner(
        self, calendar_id: UUID, expected_owner_id: UUID, new_owner_id: UUID
    ) -> bool:
        """Set ``owner_id`` only if it still equals ``expected_owner_id``."""
        ...


class MembershipStore(Protocol):
    async def add(self, member: CalendarMember) -> None:
        """Insert a row; raises ``DuplicateRecordError`` for an existing pair."""
        ...

    async def get_for_user(
        self, user_id: UUID, calendar_id: UUID
    ) -> Optional[CalendarMember]: ...

    async def list_with_users(
        self, calendar_id: UUID
    ) -> Sequence[tuple[CalendarMember, User]]: ...

    async def list_for_user(self, user_id: UUID) -> Sequence[CalendarMember]: ...

    async def count(self, calendar_id: UUID) -> int: ...

    async def update_role(self, member_id: UUID, role: str) -> None: ...

    async def delete(self, member_id: UUID) -> None: ...


class InvitationStore(Protocol):
    async def add(self, invitation: CalendarInvitation) -> None: ...

    async def get(self, invitation_id: UUID) -> Optional[CalendarInvitation]: ...

    async def get_consumable(
        self, token: str, now: datetime
    ) -> Optional[CalendarInvitation]:
        """The invitation behind ``token`` if it is unexpired and has uses left."""
        ...

    async def list_for_calendar(
        self, calendar_id: UUID
    ) -> Sequence[CalendarInvitation]: ...

    async def consume(
        self, token: str, now: datetime
    ) -> Optional[CalendarInvitation]:
        """Atomically spend one use of ``token``.

        A single conditional increment: ``use_count`` goes up by one only if
        the invitation is consumable at ``now``. Returns the post-increment
        row, or ``None`` when nothing was consumed.
        """
        ...

    async def delete(self, invitation_id: UUID) -> None: ...


class UserStore(Protocol):
    async def add(self, user: User) -> None: ...

    async def get(self, user_id: UUID) -> Optional[User]: ...

    async def get_by_email(self, email: str) -> Optional[User]: ...
