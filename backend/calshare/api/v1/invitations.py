from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status

from calshare.api.deps import CurrentUserId, get_invitation_service
from calshare.api.errors import unwrap_result
from calshare.core.config import settings
from calshare.core.limiter import limiter
from calshare.schemas import (
    InvitationAccepted,
    InvitationCreate,
    InvitationCreated,
    InvitationInfo,
    InvitationListItem,
)
from calshare.services import InvitationService

# Mounted under /calendars
calendar_router = APIRouter()
# Mounted under /invitations
token_router = APIRouter()

InvitationServiceDep = Annotated[InvitationService, Depends(get_invitation_service)]


@calendar_router.post(
    "/{calendar_id}/invitations",
    response_model=InvitationCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create invitation link",
)
async def create_invitation(
    calendar_id: UUID,
    payload: InvitationCreate,
    user_id: CurrentUserId,
    service: InvitationServiceDep,
) -> InvitationCreated:
    return unwrap_result(await service.create_invitation(calendar_id, user_id, payload))


@calendar_router.get(
    "/{calendar_id}/invitations",
    response_model=List[InvitationListItem],
    summary="List invitation links",
)
async def list_invitations(
    calendar_id: UUID,
    user_id: CurrentUserId,
    service: InvitationServiceDep,
) -> List[InvitationListItem]:
    return unwrap_result(await service.get_invitations(calendar_id, user_id))


@calendar_router.delete(
    "/{calendar_id}/invitations/{invitation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Revoke invitation link",
)
async def revoke_invitation(
    calendar_id: UUID,
    invitation_id: UUID,
    user_id: CurrentUserId,
    service: InvitationServiceDep,
) -> Response:
    unwrap_result(await service.revoke_invitation(calendar_id, invitation_id, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@token_router.get(
    "/{token}",
    response_model=InvitationInfo,
    summary="Get public invitation info",
)
@limiter.limit(settings.INVITATION_INFO_RATE_LIMIT)
async def get_invitation_info(
    request: Request,
    token: str,
    service: InvitationServiceDep,
) -> InvitationInfo:
    """Public lookup; no authentication required."""
    return unwrap_result(await service.get_invitation_info(token))


@token_router.post(
    "/{token}/accept",
    response_model=InvitationAccepted,
    summary="Accept invitation",
)
async def accept_invitation(
    token: str,
    user_id: CurrentUserId,
    service: InvitationServiceDep,
) -> InvitationAccepted:
    return unwrap_result(await service.accept_invitation(token, user_id))
