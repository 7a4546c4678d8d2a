from .calendar import DEFAULT_CALENDAR_COLOR, Calendar
from .calendar_invitation import CalendarInvitation
from .calendar_member import CalendarMember
from .user import User

__all__ = [
    "DEFAULT_CALENDAR_COLOR",
    "Calendar",
    "CalendarInvitation",
    "CalendarMember",
    "User",
]
