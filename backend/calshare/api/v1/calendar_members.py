from __future__ import annotations

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from calshare.api.deps import (
    CurrentUserId,
    get_membership_service,
    get_ownership_service,
)
from calshare.api.errors import unwrap_result
from calshare.schemas import (
    CalendarMemberCreate,
    CalendarMemberRead,
    CalendarMemberUpdate,
    OwnershipTransfer,
)
from calshare.services import MembershipService, OwnershipService

router = APIRouter()

MembershipServiceDep = Annotated[MembershipService, Depends(get_membership_service)]
OwnershipServiceDep = Annotated[OwnershipService, Depends(get_ownership_service)]


@router.get(
    "/{calendar_id}/members",
    response_model=List[CalendarMemberRead],
    summary="List calendar members",
)
async def list_calendar_members(
    calendar_id: UUID,
    user_id: CurrentUserId,
    service: MembershipServiceDep,
) -> List[CalendarMemberRead]:
    return unwrap_result(await service.get_members(calendar_id, user_id))


@router.post(
    "/{calendar_id}/members",
    response_model=CalendarMemberRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add calendar member",
)
async def create_calendar_member(
    calendar_id: UUID,
    payload: CalendarMemberCreate,
    user_id: CurrentUserId,
    service: MembershipServiceDep,
) -> CalendarMemberRead:
    return unwrap_result(await service.add_member(calendar_id, user_id, payload))


@router.put(
    "/{calendar_id}/members/{member_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Update calendar member role",
)
async def update_calendar_member(
    calendar_id: UUID,
    member_user_id: UUID,
    payload: CalendarMemberUpdate,
    user_id: CurrentUserId,
    service: MembershipServiceDep,
) -> Response:
    unwrap_result(
        await service.update_member_role(calendar_id, member_user_id, user_id, payload)
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{calendar_id}/members/{member_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Remove calendar member",
)
async def delete_calendar_member(
    calendar_id: UUID,
    member_user_id: UUID,
    user_id: CurrentUserId,
    service: MembershipServiceDep,
) -> Response:
    unwrap_result(await service.remove_member(calendar_id, member_user_id, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{calendar_id}/leave",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Leave calendar",
)
async def leave_calendar(
    calendar_id: UUID,
    user_id: CurrentUserId,
    service: MembershipServiceDep,
) -> Response:
    unwrap_result(await service.leave_calendar(calendar_id, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{calendar_id}/transfer",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Transfer calendar ownership",
)
async def transfer_ownership(
    calendar_id: UUID,
    payload: OwnershipTransfer,
    user_id: CurrentUserId,
    service: OwnershipServiceDep,
) -> Response:
    unwrap_result(await service.transfer_ownership(calendar_id, user_id, payload))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
