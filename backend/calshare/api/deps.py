from __future__ import annotations

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from calshare.core.config import settings
from calshare.core.security import verify_token
from calshare.db import session_factory
from calshare.repositories.unit_of_work import SqlUnitOfWork, UnitOfWorkFactory
from calshare.services import (
    CalendarService,
    InvitationService,
    MembershipService,
    OwnershipService,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> UUID:
    """Caller identity from the bearer token; authentication happens upstream."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_token(credentials.credentials, token_type="access")
        return UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None


CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]


def get_uow_factory() -> UnitOfWorkFactory:
    return lambda: SqlUnitOfWork(session_factory)


UowFactoryDep = Annotated[UnitOfWorkFactory, Depends(get_uow_factory)]


def get_calendar_service(uow_factory: UowFactoryDep) -> CalendarService:
    return CalendarService(uow_factory)


def get_membership_service(uow_factory: UowFactoryDep) -> MembershipService:
    return MembershipService(uow_factory)


def get_ownership_service(uow_factory: UowFactoryDep) -> OwnershipService:
    return OwnershipService(uow_factory)


def get_invitation_service(uow_factory: UowFactoryDep) -> InvitationService:
    return InvitationService(uow_factory, base_url=settings.FRONTEND_URL)
