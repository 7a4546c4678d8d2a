"""Shared fixtures for calshare tests.

Every test gets its own file-backed SQLite database so concurrent units of
work really contend on the same file. Environment overrides are applied
before ``calshare`` is imported because settings are read at import time.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("FRONTEND_URL", "https://calendar.test")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / 'calshare-test.db'}",
)

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from calshare.api.deps import get_uow_factory  # noqa: E402
from calshare.core.clock import utcnow  # noqa: E402
from calshare.core.security import create_access_token  # noqa: E402
from calshare.db import build_engine, build_session_factory, init_db  # noqa: E402
from calshare.domain.roles import MemberRole  # noqa: E402
from calshare.models import (  # noqa: E402
    Calendar,
    CalendarInvitation,
    CalendarMember,
    User,
)
from calshare.repositories import SqlUnitOfWork  # noqa: E402
from calshare.services import (  # noqa: E402
    CalendarService,
    InvitationService,
    MembershipService,
    OwnershipService,
)

FRONTEND_URL = "https://calendar.test"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def engine(tmp_path):
    # NullPool: no connection outlives the test's event loop
    engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'calshare.db'}",
        echo=False,
        poolclass=NullPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def uow_factory(engine):
    session_factory = build_session_factory(engine)
    return lambda: SqlUnitOfWork(session_factory)


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------


class Seeder:
    """Writes fixture rows directly through the stores, bypassing use cases."""

    def __init__(self, uow_factory) -> None:
        self._uow_factory = uow_factory
        self._counter = 0

    async def user(self, name: Optional[str] = None, *, email: Optional[str] = None) -> User:
        self._counter += 1
        name = name or f"User {self._counter}"
        email = email or f"user{self._counter}@example.com"
        user = User(email=email, name=name, picture=f"https://img.test/{self._counter}.png")
        async with self._uow_factory() as uow:
            await uow.users.add(user)
            await uow.commit()
        return user

    async def calendar(
        self, owner: User, name: str = "Team calendar", color: str = "#10B981"
    ) -> Calendar:
        calendar = Calendar(owner_id=owner.id, name=name, color=color)
        async with self._uow_factory() as uow:
            await uow.calendars.add(calendar)
            await uow.commit()
        return calendar

    async def member(
        self,
        calendar: Calendar,
        user: User,
        role: MemberRole,
        *,
        invited_by: Optional[User] = None,
    ) -> CalendarMember:
        member = CalendarMember.create(
            calendar_id=calendar.id,
            user_id=user.id,
            role=role,
            invited_by=(invited_by.id if invited_by else calendar.owner_id),
            accepted=True,
        )
        async with self._uow_factory() as uow:
            await uow.members.add(member)
            await uow.commit()
        return member

    async def invitation(
        self,
        calendar: Calendar,
        created_by: User,
        *,
        role: str = "viewer",
        max_uses: Optional[int] = None,
        use_count: int = 0,
        expires_at: Optional[datetime] = None,
        token: Optional[str] = None,
    ) -> CalendarInvitation:
        self._counter += 1
        invitation = CalendarInvitation(
            calendar_id=calendar.id,
            token=token or f"seeded-invitation-token-{self._counter:04d}",
            role=role,
            expires_at=expires_at or utcnow() + timedelta(days=7),
            max_uses=max_uses,
            use_count=use_count,
            created_by=created_by.id,
        )
        async with self._uow_factory() as uow:
            await uow.invitations.add(invitation)
            await uow.commit()
        return invitation


@pytest.fixture
def seed(uow_factory) -> Seeder:
    return Seeder(uow_factory)


@dataclass
class SharedCalendar:
    calendar: Calendar
    owner: User
    admin: User
    editor: User
    viewer: User
    outsider: User


@pytest.fixture
async def shared(seed: Seeder) -> SharedCalendar:
    """A calendar with one member of each stored role plus a stranger."""
    owner = await seed.user("Olivia Owner", email="owner@example.com")
    admin = await seed.user("Adam Admin", email="admin@example.com")
    editor = await seed.user("Erin Editor", email="editor@example.com")
    viewer = await seed.user("Victor Viewer", email="viewer@example.com")
    outsider = await seed.user("Oscar Outsider", email="outsider@example.com")

    calendar = await seed.calendar(owner)
    await seed.member(calendar, admin, MemberRole.ADMIN)
    await seed.member(calendar, editor, MemberRole.EDITOR)
    await seed.member(calendar, viewer, MemberRole.VIEWER)
    return SharedCalendar(calendar, owner, admin, editor, viewer, outsider)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture
def calendar_service(uow_factory) -> CalendarService:
    return CalendarService(uow_factory)


@pytest.fixture
def membership_service(uow_factory) -> MembershipService:
    return MembershipService(uow_factory)


@pytest.fixture
def ownership_service(uow_factory) -> OwnershipService:
    return OwnershipService(uow_factory)


@pytest.fixture
def invitation_service(uow_factory) -> InvitationService:
    return InvitationService(uow_factory, base_url=FRONTEND_URL)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


def bearer_for(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def app(uow_factory):
    from calshare.main import create_application

    application = create_application()
    application.dependency_overrides[get_uow_factory] = lambda: uow_factory
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def auth_headers():
    """``auth_headers(user)`` builds the Authorization header for ``user``."""
    return bearer_for
