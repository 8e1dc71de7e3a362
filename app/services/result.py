"""
Gateway Results
Uniform outcome type returned by every persistence operation
"""

import asyncio
import functools
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from asyncpg import exceptions as pg_errors
from fastapi import HTTPException, status

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResultKind(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CAPACITY = "capacity"
    INVALID = "invalid"
    BACKEND = "backend"


_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.CAPACITY: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.BACKEND: status.HTTP_502_BAD_GATEWAY,
}

_INVALID_ERRORS = (
    pg_errors.ForeignKeyViolationError,
    pg_errors.CheckViolationError,
    pg_errors.NotNullViolationError,
    pg_errors.DataError,
)

# driver and transport failures
_BACKEND_ERRORS = (
    pg_errors.PostgresError,
    pg_errors.InterfaceError,
    OSError,
    ConnectionError,
    asyncio.TimeoutError,
)


@dataclass(frozen=True)
class GatewayError:
    kind: ErrorKind
    message: str
    operation: str


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    """
    Outcome of a gateway operation

    OK carries data, EMPTY means the request succeeded with no rows,
    ERROR carries a classified GatewayError.
    """
    kind: ResultKind
    data: Optional[T] = None
    error: Optional[GatewayError] = None

    @classmethod
    def ok(cls, data: T) -> "GatewayResult[T]":
        return cls(ResultKind.OK, data=data)

    @classmethod
    def empty(cls) -> "GatewayResult[T]":
        return cls(ResultKind.EMPTY)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, operation: str) -> "GatewayResult[T]":
        return cls(ResultKind.ERROR, error=GatewayError(kind, message, operation))

    @classmethod
    def from_data(cls, data: Any) -> "GatewayResult":
        if data is None:
            return cls.empty()
        if isinstance(data, (list, tuple, set, dict)) and len(data) == 0:
            return cls.empty()
        return cls.ok(data)

    @property
    def is_ok(self) -> bool:
        return self.kind == ResultKind.OK

    @property
    def is_empty(self) -> bool:
        return self.kind == ResultKind.EMPTY

    @property
    def is_error(self) -> bool:
        return self.kind == ResultKind.ERROR

    def value_or(self, default: Any) -> Any:
        """Data when OK, default otherwise (EMPTY and ERROR alike)"""
        return self.data if self.is_ok else default

    def unwrap(self, not_found: str = "Not found") -> T:
        """
        Data of an OK result

        Raises:
            HTTPException: 404 for EMPTY, mapped status for ERROR
        """
        self.raise_for_error()
        if self.is_empty:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return self.data

    def unwrap_or(self, default: Any) -> Any:
        """Data when OK, default when EMPTY; raises for ERROR"""
        self.raise_for_error()
        return self.data if self.is_ok else default

    def raise_for_error(self) -> None:
        if self.is_error:
            raise HTTPException(
                status_code=_STATUS_BY_KIND.get(self.error.kind, status.HTTP_502_BAD_GATEWAY),
                detail=self.error.message
            )


def classify_exception(exc: BaseException) -> ErrorKind:
    if isinstance(exc, pg_errors.UniqueViolationError):
        return ErrorKind.CONFLICT
    if isinstance(exc, _INVALID_ERRORS):
        return ErrorKind.INVALID
    return ErrorKind.BACKEND


def describe_error(exc: Any) -> str:
    """
    Best-effort human readable message

    Tries a plain string, then message/detail/description fields,
    then the exception text, then a raw serialization.
    """
    if isinstance(exc, str):
        return exc
    if isinstance(exc, dict):
        for key in ("message", "detail", "description"):
            value = exc.get(key)
            if isinstance(value, str) and value:
                return value
    for attr in ("message", "detail", "description"):
        value = getattr(exc, attr, None)
        if isinstance(value, str) and value:
            return value
    if isinstance(exc, BaseException):
        return str(exc) or type(exc).__name__
    try:
        return json.dumps(exc, default=str)
    except (TypeError, ValueError):
        return repr(exc)


def gateway_operation(name: str):
    """
    Wrap an async persistence call so it returns a GatewayResult

    Driver and connection exceptions are logged and classified instead
    of propagating. Other exceptions are programming errors and are
    raised unchanged.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> GatewayResult:
            try:
                data = await func(*args, **kwargs)
            except _BACKEND_ERRORS as exc:
                kind = classify_exception(exc)
                logger.warning("Gateway operation %s failed (%s): %s", name, kind.value, exc)
                return GatewayResult.failure(kind, describe_error(exc), name)
            if isinstance(data, GatewayResult):
                return data
            return GatewayResult.from_data(data)
        return wrapper
    return decorator
