from fastapi import APIRouter

from calshare.api.v1 import calendar_members, calendars, health, invitations


api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(calendars.router, prefix="/calendars", tags=["calendars"])
api_router.include_router(calendar_members.router, prefix="/calendars", tags=["calendar-members"])
api_router.include_router(invitations.calendar_router, prefix="/calendars", tags=["invitations"])
api_router.include_router(invitations.token_router, prefix="/invitations", tags=["invitations"])
