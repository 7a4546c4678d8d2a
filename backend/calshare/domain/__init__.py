from .roles import (
    ROLE_RANK,
    CalendarRole,
    InvitationRole,
    MemberRole,
    can_edit,
    can_manage_members,
    has_required_role,
    is_owner,
    rank,
)

__all__ = [
    "ROLE_RANK",
    "CalendarRole",
    "InvitationRole",
    "MemberRole",
    "can_edit",
    "can_manage_members",
    "has_required_role",
    "is_owner",
    "rank",
]
