"""Ownership transfer and the single-owner invariant."""

from __future__ import annotations

import asyncio

import pytest

from calshare.domain.roles import CalendarRole, MemberRole
from calshare.schemas import CalendarMemberUpdate, OwnershipTransfer
from calshare.services import ErrorCode

pytestmark = pytest.mark.integration


async def _roles(membership_service, calendar_id, viewer_id):
    result = await membership_service.get_members(calendar_id, viewer_id)
    assert result.ok
    return {member.user_id: member.role for member in result.value}


async def _assert_single_owner(uow_factory, calendar_id):
    async with uow_factory() as uow:
        calendar = await uow.calendars.get(calendar_id)
        assert calendar is not None
        rows = await uow.members.list_with_users(calendar_id)
        owner_id = calendar.owner_id
        member_ids = {member.user_id for member, _ in rows}
        member_roles = {member.role for member, _ in rows}
    assert owner_id not in member_ids
    assert CalendarRole.OWNER.value not in member_roles
    return owner_id


async def test_transfer_to_admin(ownership_service, membership_service, uow_factory, shared):
    result = await ownership_service.transfer_ownership(
        shared.calendar.id, shared.owner.id, OwnershipTransfer(new_owner_id=shared.admin.id)
    )

    assert result.ok
    assert await _assert_single_owner(uow_factory, shared.calendar.id) == shared.admin.id

    roles = await _roles(membership_service, shared.calendar.id, shared.admin.id)
    assert roles[shared.admin.id] is CalendarRole.OWNER
    assert roles[shared.owner.id] is CalendarRole.ADMIN

    async with uow_factory() as uow:
        former = await uow.members.get_for_user(shared.owner.id, shared.calendar.id)
    assert former.invited_by == shared.admin.id


async def test_transfer_round_trip(ownership_service, uow_factory, shared):
    forward = await ownership_service.transfer_ownership(
        shared.calendar.id, shared.owner.id, OwnershipTransfer(new_owner_id=shared.admin.id)
    )
    back = await ownership_service.transfer_ownership(
        shared.calendar.id, shared.admin.id, OwnershipTransfer(new_owner_id=shared.owner.id)
    )

    assert forward.ok and back.ok
    assert await _assert_single_owner(uow_factory, shared.calendar.id) == shared.owner.id
    async with uow_factory() as uow:
        admin_row = await uow.members.get_for_user(shared.admin.id, shared.calendar.id)
        owner_row = await uow.members.get_for_user(shared.owner.id, shared.calendar.id)
    assert admin_row.role == MemberRole.ADMIN.value
    assert owner_row is None


async def test_only_owner_can_transfer(ownership_service, shared):
    result = await ownership_service.transfer_ownership(
        shared.calendar.id, shared.admin.id, OwnershipTransfer(new_owner_id=shared.editor.id)
    )

    assert result.error.code is ErrorCode.FORBIDDEN


async def test_cannot_transfer_to_self(ownership_service, shared):
    result = await ownership_service.transfer_ownership(
        shared.calendar.id, shared.owner.id, OwnershipTransfer(new_owner_id=shared.owner.id)
    )

    assert result.error.code is ErrorCode.FORBIDDEN


async def test_cannot_transfer_to_non_member(ownership_service, shared):
    result = await ownership_service.transfer_ownership(
        shared.calendar.id, shared.owner.id, OwnershipTransfer(new_owner_id=shared.outsider.id)
    )

    assert result.error.code is ErrorCode.NOT_FOUND


@pytest.mark.parametrize("candidate", ["editor", "viewer"])
async def test_candidate_must_be_admin(ownership_service, uow_factory, shared, candidate):
    result = await ownership_service.transfer_ownership(
        shared.calendar.id,
        shared.owner.id,
        OwnershipTransfer(new_owner_id=getattr(shared, candidate).id),
    )

    assert result.error.code is ErrorCode.FORBIDDEN
    assert await _assert_single_owner(uow_factory, shared.calendar.id) == shared.owner.id


async def test_racing_transfers_leave_one_owner(
    ownership_service, membership_service, uow_factory, seed, shared
):
    second_admin = await seed.user("Second Admin")
    await seed.member(shared.calendar, second_admin, MemberRole.ADMIN)

    results = await asyncio.gather(
        ownership_service.transfer_ownership(
            shared.calendar.id, shared.owner.id, OwnershipTransfer(new_owner_id=shared.admin.id)
        ),
        ownership_service.transfer_ownership(
            shared.calendar.id, shared.owner.id, OwnershipTransfer(new_owner_id=second_admin.id)
        ),
    )

    assert sum(r.ok for r in results) >= 1
    for failed in (r for r in results if not r.ok):
        assert failed.error.code in {ErrorCode.CONFLICT, ErrorCode.FORBIDDEN}

    owner_id = await _assert_single_owner(uow_factory, shared.calendar.id)
    assert owner_id in {shared.admin.id, second_admin.id}
    roles = await _roles(membership_service, shared.calendar.id, owner_id)
    assert [user for user, role in roles.items() if role is CalendarRole.OWNER] == [owner_id]


async def test_single_owner_after_mixed_operations(
    ownership_service, membership_service, uow_factory, shared
):
    await membership_service.update_member_role(
        shared.calendar.id,
        shared.editor.id,
        shared.owner.id,
        CalendarMemberUpdate(role=MemberRole.ADMIN),
    )
    await ownership_service.transfer_ownership(
        shared.calendar.id, shared.owner.id, OwnershipTransfer(new_owner_id=shared.editor.id)
    )
    await membership_service.leave_calendar(shared.calendar.id, shared.owner.id)
    await membership_service.remove_member(
        shared.calendar.id, shared.viewer.id, shared.editor.id
    )
    await ownership_service.transfer_ownership(
        shared.calendar.id, shared.editor.id, OwnershipTransfer(new_owner_id=shared.admin.id)
    )

    assert await _assert_single_owner(uow_factory, shared.calendar.id) == shared.admin.id
    roles = await _roles(membership_service, shared.calendar.id, shared.admin.id)
    assert roles == {
        shared.admin.id: CalendarRole.OWNER,
        shared.editor.id: CalendarRole.ADMIN,
    }
