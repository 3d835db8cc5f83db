"""
Error kinds and explicit result values.

Services and stores never raise for expected failures; they return a
``Result`` that either carries a value or an ``AppError``.  The HTTP layer
turns a failed result into a response in exactly one place
(``api.middleware``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    DUPLICATE_USER = "duplicate_user"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNAUTHENTICATED = "unauthenticated"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    NOT_FOUND_OR_FORBIDDEN = "not_found_or_forbidden"
    GUEST_LIMIT_REACHED = "guest_limit_reached"
    RATE_LIMITED = "rate_limited"
    UNEXPECTED = "unexpected_failure"


STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.DUPLICATE_USER: 400,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.INVALID_TOKEN: 403,
    ErrorKind.EXPIRED_TOKEN: 403,
    ErrorKind.NOT_FOUND_OR_FORBIDDEN: 404,
    ErrorKind.GUEST_LIMIT_REACHED: 403,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UNEXPECTED: 500,
}


@dataclass(frozen=True)
class AppError:
    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "kind": self.kind.value}
        if self.kind is ErrorKind.GUEST_LIMIT_REACHED:
            # lets the client prompt for sign-up
            body["guestLimitReached"] = True
        return body


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[AppError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(error=AppError(kind, message))

    def unwrap(self) -> T:
        """Return the value or raise ``ApiError``. Route handlers only."""
        if self.error is not None:
            raise ApiError(self.error)
        return self.value


class ApiError(Exception):
    """Raised at the HTTP boundary only, rendered by the registered handler."""

    def __init__(self, error: AppError) -> None:
        super().__init__(error.message)
        self.error = error
