from .calendars import CalendarService
from .errors import AppError, ErrorCode
from .invitations import InvitationService
from .memberships import MembershipService
from .ownership import OwnershipService
from .result import Err, Ok, Result

__all__ = [
    "AppError",
    "CalendarService",
    "Err",
    "ErrorCode",
    "InvitationService",
    "MembershipService",
    "Ok",
    "OwnershipService",
    "Result",
]
