"""Translation of use-case results and exceptions into HTTP responses.

This is the only module that knows which status code an ``ErrorCode`` maps
to. Every error body has the shape ``{"code", "message", "details"?}``.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from calshare.core.config import settings
from calshare.services.errors import (
    AppError,
    ErrorCode,
    internal_error,
    validation_error,
)
from calshare.services.result import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


def route_template(request: Request) -> str:
    """Matched route path, e.g. ``/invitations/{token}``; never the raw URL."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "<unmatched>"


STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

CODE_BY_STATUS: dict[int, ErrorCode] = {
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.RATE_LIMITED,
}


class ServiceError(Exception):
    """Raised at the HTTP boundary to short-circuit a route with an ``AppError``."""

    def __init__(self, error: AppError) -> None:
        super().__init__(error.message)
        self.error = error


def unwrap_result(result: Result[T]) -> T:
    if result.ok:
        return result.value
    raise ServiceError(result.error)


def error_response(error: AppError, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_CODE[error.code],
        content=jsonable_encoder(error.to_dict()),
        headers=headers,
    )


def get_cors_headers(request: Request) -> dict[str, str]:
    """CORS headers for responses produced outside the CORS middleware."""
    origin = request.headers.get("origin")
    if not origin or origin not in settings.BACKEND_CORS_ORIGINS:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
    }


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return error_response(exc.error)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            code = ErrorCode.INTERNAL_ERROR
        else:
            code = CODE_BY_STATUS.get(exc.status_code, ErrorCode.VALIDATION_ERROR)
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": code.value, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "path": ".".join(str(part) for part in error.get("loc", ())),
                "message": error.get("msg", ""),
            }
            for error in exc.errors()
        ]
        return error_response(validation_error(details))

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return error_response(
            AppError(ErrorCode.RATE_LIMITED, f"Rate limit exceeded: {exc.detail}")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s", request.method, route_template(request)
        )
        return error_response(internal_error(), headers=get_cors_headers(request))
