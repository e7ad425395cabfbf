"""
network_sdk.tier0_core.http
────────────────────────────
HTTP primitives: methods, status codes, the status ranges the response
pipeline classifies by, and the typed Result envelope every operation
completes with.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from network_sdk.tier0_core.errors import NetworkError

T = TypeVar("T")


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


# ── Status code constants ──────────────────────────────────────────────────

class HTTP:
    """HTTP status codes the response pipeline cares about."""

    # 2xx
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204
    RESET_CONTENT = 205

    # 4xx
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429

    # 5xx
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504


# Successful range is half-open: 299 is classified as an error.
SUCCESS_RANGE = range(200, 299)

# Codes for which an empty body is the expected, valid success.
EMPTY_RESPONSE_CODES: frozenset[int] = frozenset({HTTP.CREATED, HTTP.NO_CONTENT, HTTP.RESET_CONTENT})

# Codes whose body, if any, is disregarded.
NO_BODY_CODES: frozenset[int] = frozenset({HTTP.NO_CONTENT, HTTP.RESET_CONTENT})

# Missing status codes are classified as a server error.
MISSING_STATUS = HTTP.INTERNAL_SERVER_ERROR


def is_success(status: int) -> bool:
    return status in SUCCESS_RANGE


# ── Result envelope ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one operation: either a decoded value or a NetworkError."""
    value: T | None = None
    error: NetworkError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: NetworkError) -> Result[T]:
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, or raise the error this result carries."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


__all__ = [
    "HTTPMethod",
    "HTTP",
    "SUCCESS_RANGE",
    "EMPTY_RESPONSE_CODES",
    "NO_BODY_CODES",
    "MISSING_STATUS",
    "is_success",
    "Result",
]
