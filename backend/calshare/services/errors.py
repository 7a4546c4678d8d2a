"""Error taxonomy shared by every use case.

Use cases never raise for expected outcomes; they return ``Err(AppError)``.
Only the HTTP boundary maps an ``ErrorCode`` to a status code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(frozen=True)
class AppError:
    code: ErrorCode
    message: str
    details: Optional[Any] = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


def not_found(resource: str) -> AppError:
    return AppError(ErrorCode.NOT_FOUND, f"{resource} not found")


def forbidden(message: str) -> AppError:
    return AppError(ErrorCode.FORBIDDEN, message)


def conflict(message: str) -> AppError:
    return AppError(ErrorCode.CONFLICT, message)


def validation_error(details: Any = None) -> AppError:
    return AppError(ErrorCode.VALIDATION_ERROR, "Invalid request", details)


def database_error(message: str = "Database operation failed") -> AppError:
    return AppError(ErrorCode.DATABASE_ERROR, message)


def internal_error(message: str = "Internal server error") -> AppError:
    return AppError(ErrorCode.INTERNAL_ERROR, message)
