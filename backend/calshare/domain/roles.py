"""Calendar role ranking and the predicates built on it.

Every authorization decision in the service reduces to comparing two ranks
from ``ROLE_RANK``. The owner role is never stored: it is derived from
``Calendar.owner_id``. Members carry one of the ``MemberRole`` values, and an
invitation link can only ever grant an ``InvitationRole``.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Union


class CalendarRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class MemberRole(str, Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class InvitationRole(str, Enum):
    EDITOR = "editor"
    VIEWER = "viewer"


AnyRole = Union[CalendarRole, MemberRole, InvitationRole, str]

ROLE_RANK: Mapping[CalendarRole, int] = {
    CalendarRole.OWNER: 4,
    CalendarRole.ADMIN: 3,
    CalendarRole.EDITOR: 2,
    CalendarRole.VIEWER: 1,
}


def as_calendar_role(role: AnyRole) -> CalendarRole:
    if isinstance(role, CalendarRole):
        return role
    return CalendarRole(role.value if isinstance(role, Enum) else role)


def rank(role: AnyRole) -> int:
    return ROLE_RANK[as_calendar_role(role)]


def has_required_role(have: AnyRole, need: AnyRole) -> bool:
    return rank(have) >= rank(need)


def can_edit(role: AnyRole) -> bool:
    return has_required_role(role, CalendarRole.EDITOR)


def can_manage_members(role: AnyRole) -> bool:
    return has_required_role(role, CalendarRole.ADMIN)


def is_owner(role: AnyRole) -> bool:
    return as_calendar_role(role) is CalendarRole.OWNER
