"""Calendar lifecycle and soft-delete visibility."""

from __future__ import annotations

from uuid import uuid4

import pytest

from calshare.domain.roles import CalendarRole, MemberRole
from calshare.models import DEFAULT_CALENDAR_COLOR
from calshare.schemas import (
    CalendarCreate,
    CalendarMemberCreate,
    CalendarMemberUpdate,
    CalendarUpdate,
    InvitationCreate,
    OwnershipTransfer,
)
from calshare.services import ErrorCode

pytestmark = pytest.mark.integration


async def test_create_calendar_makes_caller_owner(calendar_service, uow_factory, seed):
    owner = await seed.user("Casey Creator")

    result = await calendar_service.create_calendar(owner.id, CalendarCreate(name="Work"))

    assert result.ok
    created = result.value
    assert created.role is CalendarRole.OWNER
    assert created.color == DEFAULT_CALENDAR_COLOR
    assert created.member_count == 1
    assert created.owner.id == owner.id
    async with uow_factory() as uow:
        assert await uow.members.count(created.id) == 0


async def test_create_calendar_for_unknown_user(calendar_service):
    result = await calendar_service.create_calendar(uuid4(), CalendarCreate(name="Ghost"))

    assert result.error.code is ErrorCode.NOT_FOUND


async def test_list_calendars_with_effective_roles(calendar_service, seed, shared):
    own = await seed.calendar(shared.editor, name="Editor's own")

    result = await calendar_service.get_calendars(shared.editor.id)

    assert result.ok
    roles = {calendar.id: calendar.role for calendar in result.value}
    assert roles == {
        shared.calendar.id: CalendarRole.EDITOR,
        own.id: CalendarRole.OWNER,
    }
    team = next(c for c in result.value if c.id == shared.calendar.id)
    assert team.member_count == 4
    assert team.owner.name == "Olivia Owner"


async def test_outsider_sees_nothing(calendar_service, shared):
    listed = await calendar_service.get_calendars(shared.outsider.id)
    detail = await calendar_service.get_calendar(shared.calendar.id, shared.outsider.id)

    assert listed.value == []
    assert detail.error.code is ErrorCode.FORBIDDEN


async def test_viewer_reads_detail(calendar_service, shared):
    result = await calendar_service.get_calendar(shared.calendar.id, shared.viewer.id)

    assert result.ok
    assert result.value.role is CalendarRole.VIEWER
    assert result.value.name == "Team calendar"


async def test_admin_updates_calendar(calendar_service, shared):
    result = await calendar_service.update_calendar(
        shared.calendar.id, shared.admin.id, CalendarUpdate(name="Renamed", color="#000000")
    )

    assert result.ok
    assert result.value.name == "Renamed"
    assert result.value.color == "#000000"
    assert result.value.updated_at >= shared.calendar.updated_at

    detail = await calendar_service.get_calendar(shared.calendar.id, shared.viewer.id)
    assert detail.value.name == "Renamed"


async def test_editor_cannot_update_calendar(calendar_service, shared):
    result = await calendar_service.update_calendar(
        shared.calendar.id, shared.editor.id, CalendarUpdate(name="Nope")
    )

    assert result.error.code is ErrorCode.FORBIDDEN


async def test_only_owner_deletes(calendar_service, shared):
    by_admin = await calendar_service.delete_calendar(shared.calendar.id, shared.admin.id)
    by_owner = await calendar_service.delete_calendar(shared.calendar.id, shared.owner.id)
    again = await calendar_service.delete_calendar(shared.calendar.id, shared.owner.id)

    assert by_admin.error.code is ErrorCode.FORBIDDEN
    assert by_owner.ok
    assert again.error.code is ErrorCode.NOT_FOUND


async def test_deleted_calendar_is_not_found_everywhere(
    calendar_service,
    membership_service,
    invitation_service,
    ownership_service,
    shared,
):
    deleted = await calendar_service.delete_calendar(shared.calendar.id, shared.owner.id)
    assert deleted.ok
    calendar_id = shared.calendar.id
    owner_id = shared.owner.id

    results = [
        await calendar_service.get_calendar(calendar_id, owner_id),
        await calendar_service.update_calendar(calendar_id, owner_id, CalendarUpdate(name="x")),
        await membership_service.get_members(calendar_id, owner_id),
        await membership_service.add_member(
            calendar_id,
            owner_id,
            CalendarMemberCreate(email="outsider@example.com", role=MemberRole.VIEWER),
        ),
        await membership_service.update_member_role(
            calendar_id, shared.viewer.id, owner_id, CalendarMemberUpdate(role=MemberRole.EDITOR)
        ),
        await membership_service.remove_member(calendar_id, shared.viewer.id, owner_id),
        await membership_service.leave_calendar(calendar_id, shared.viewer.id),
        await ownership_service.transfer_ownership(
            calendar_id, owner_id, OwnershipTransfer(new_owner_id=shared.admin.id)
        ),
        await invitation_service.create_invitation(
            calendar_id, owner_id, InvitationCreate(role="viewer")
        ),
        await invitation_service.get_invitations(calendar_id, owner_id),
    ]

    assert [r.error.code for r in results] == [ErrorCode.NOT_FOUND] * len(results)

    listed = await calendar_service.get_calendars(shared.viewer.id)
    assert listed.value == []
