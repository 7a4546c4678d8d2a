from __future__ import annotations

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from calshare.api.deps import CurrentUserId, get_calendar_service
from calshare.api.errors import unwrap_result
from calshare.schemas import CalendarCreate, CalendarRead, CalendarUpdate
from calshare.services import CalendarService

router = APIRouter()

CalendarServiceDep = Annotated[CalendarService, Depends(get_calendar_service)]


@router.get(
    "",
    response_model=List[CalendarRead],
    summary="List calendars",
)
async def list_calendars(
    user_id: CurrentUserId,
    service: CalendarServiceDep,
) -> List[CalendarRead]:
    return unwrap_result(await service.get_calendars(user_id))


@router.post(
    "",
    response_model=CalendarRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create calendar",
)
async def create_calendar(
    payload: CalendarCreate,
    user_id: CurrentUserId,
    service: CalendarServiceDep,
) -> CalendarRead:
    return unwrap_result(await service.create_calendar(user_id, payload))


@router.get(
    "/{calendar_id}",
    response_model=CalendarRead,
    summary="Get calendar by id",
)
async def get_calendar(
    calendar_id: UUID,
    user_id: CurrentUserId,
    service: CalendarServiceDep,
) -> CalendarRead:
    return unwrap_result(await service.get_calendar(calendar_id, user_id))


@router.put(
    "/{calendar_id}",
    response_model=CalendarRead,
    summary="Update calendar",
)
async def update_calendar(
    calendar_id: UUID,
    payload: CalendarUpdate,
    user_id: CurrentUserId,
    service: CalendarServiceDep,
) -> CalendarRead:
    return unwrap_result(await service.update_calendar(calendar_id, user_id, payload))


@router.delete(
    "/{calendar_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete calendar",
)
async def delete_calendar(
    calendar_id: UUID,
    user_id: CurrentUserId,
    service: CalendarServiceDep,
) -> Response:
    unwrap_result(await service.delete_calendar(calendar_id, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
