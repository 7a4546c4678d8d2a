from .calendar import (
    CalendarCreate,
    CalendarOwnerRead,
    CalendarRead,
    CalendarUpdate,
)
from .invitation import (
    InvitationAccepted,
    InvitationCreate,
    InvitationCreated,
    InvitationInfo,
    InvitationListItem,
)
from .member import (
    CalendarMemberCreate,
    CalendarMemberRead,
    CalendarMemberUpdate,
    MemberUserRead,
    OwnershipTransfer,
)

__all__ = [
    "CalendarCreate",
    "CalendarOwnerRead",
    "CalendarRead",
    "CalendarUpdate",
    "CalendarMemberCreate",
    "CalendarMemberRead",
    "CalendarMemberUpdate",
    "InvitationAccepted",
    "InvitationCreate",
    "InvitationCreated",
    "InvitationInfo",
    "InvitationListItem",
    "MemberUserRead",
    "OwnershipTransfer",
]
