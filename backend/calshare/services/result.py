from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar, Union

from calshare.repositories.errors import PersistenceError
from calshare.services.errors import AppError, database_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: bool = True


@dataclass(frozen=True)
class Err:
    error: AppError
    ok: bool = False


Result = Union[Ok[T], Err]


def persistence_guard(
    func: Callable[..., Awaitable[Result[T]]],
) -> Callable[..., Awaitable[Result[T]]]:
    """Turn a store failure escaping a use case into a DATABASE_ERROR result."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Result[T]:
        try:
            return await func(*args, **kwargs)
        except PersistenceError:
            logger.exception("Persistence failure in %s", func.__qualname__)
            return Err(database_error())

    return wrapper
