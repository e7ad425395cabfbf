"""
network_sdk.tier0_core.errors
──────────────────────────────
Closed error taxonomy for network operations, the decoded shape of a
server-reported error body, and optional Sentry/OTel error capture.

Every failure an operation can deliver is exactly one of:

    OperationFailedError   generic failure (5xx, empty error body)
    NetworkConnectionError no network reachability
    ServiceError           decoded 4xx/5xx error body
    WrappedError           opaque transport or decoding error

Minimal stack: Sentry OSS + OTel error signals
Select via:    NETWORK_ERROR_BACKEND=sentry|otel|none
"""
from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ERROR_MESSAGE = "A temporary problem occurred."
DEFAULT_CONNECTION_ERROR_MESSAGE = "No internet connection."


# ── Service error payload ─────────────────────────────────────────────────────

class ServiceErrorPayload(BaseModel):
    """Error body returned by the server. Any field may be missing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    error_key: str | None = Field(default=None, alias="errorKey")
    title: str | None = None
    status: int | None = None
    path: str | None = None


# ── Base error ────────────────────────────────────────────────────────────────

class NetworkError(Exception):
    """
    Base class for all network errors. Every error has:
    - kind: which taxonomy variant it is
    - code: stable machine-readable string (snake_case)
    - message: safe to surface to end users
    - detail: internal context, never shown to users
    """

    kind: str = "network_error"
    code: str = "network_error"
    default_message: str = DEFAULT_ERROR_MESSAGE

    def __init__(
        self,
        message: str | None = None,
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.message = message or self.default_message
        self.detail = detail or self.message
        self.metadata = metadata
        super().__init__(self.detail)
        _capture(self)

    @property
    def user_message(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {
            "error": {
                "kind": self.kind,
                "code": self.code,
                "message": self.message,
            }
        }


# ── Taxonomy ──────────────────────────────────────────────────────────────────

class OperationFailedError(NetworkError):
    """Generic failure: server error or an error response without a body."""
    kind = "operation_failed"
    code = "operation_failed"


class NetworkConnectionError(NetworkError):
    """The network was not reachable; no request was sent."""
    kind = "connection_error"
    code = "connection_error"
    default_message = DEFAULT_CONNECTION_ERROR_MESSAGE


class ServiceError(NetworkError):
    """The server answered with a decodable error body."""
    kind = "service_error"
    code = "service_error"

    def __init__(
        self,
        payload: ServiceErrorPayload,
        default_message: str | None = None,
        **metadata: Any,
    ) -> None:
        self.payload = payload
        message = payload.error_key or default_message or self.default_message
        detail = f"service error {payload.status}: {payload.error_key or payload.title}"
        super().__init__(message, detail, **metadata)

    @property
    def error_key(self) -> str | None:
        return self.payload.error_key

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["error"]["payload"] = self.payload.model_dump(by_alias=True, exclude_none=True)
        return d


class WrappedError(NetworkError):
    """An underlying transport or decoding error. Its detail is never shown to users."""
    kind = "wrapped"
    code = "wrapped_error"

    def __init__(
        self,
        underlying: BaseException,
        message: str | None = None,
        **metadata: Any,
    ) -> None:
        self.underlying = underlying
        super().__init__(message, f"{type(underlying).__name__}: {underlying}", **metadata)
        self.__cause__ = underlying


# ── Programming / configuration errors ────────────────────────────────────────

class ConfigurationError(Exception):
    """Misconfiguration detected while building or running an operation."""


class OperationStateError(RuntimeError):
    """An operation was asked to move backwards or out of a terminal state."""


# ── Error capture backend ─────────────────────────────────────────────────────

def _capture(error: NetworkError) -> None:
    """Send error to configured backend. Called automatically by NetworkError.__init__."""
    # config imports this module, so resolve it at call time.
    from network_sdk.tier0_core.config import get_config

    backend = get_config().error_backend.lower()
    if backend == "none":
        return
    if backend == "sentry":
        _capture_sentry(error)
    elif backend == "otel":
        _capture_otel(error)


def _capture_sentry(error: NetworkError) -> None:
    import sentry_sdk
    if isinstance(error, (OperationFailedError, WrappedError)):
        sentry_sdk.capture_exception(error)
    else:
        sentry_sdk.capture_message(
            str(error),
            level="warning",
            extras={"kind": error.kind, "code": error.code, **error.metadata},
        )


def _capture_otel(error: NetworkError) -> None:
    from opentelemetry import trace
    span = trace.get_current_span()
    span.record_exception(error)
    span.set_status(trace.StatusCode.ERROR, str(error))


def configure_sentry(dsn: str, **kwargs: Any) -> None:
    """Initialize Sentry. Call once at application startup."""
    import sentry_sdk

    from network_sdk.tier0_core.config import _reset_config

    sentry_sdk.init(dsn=dsn, **kwargs)
    os.environ["NETWORK_ERROR_BACKEND"] = "sentry"
    _reset_config()


__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    "DEFAULT_CONNECTION_ERROR_MESSAGE",
    "ServiceErrorPayload",
    "NetworkError",
    "OperationFailedError",
    "NetworkConnectionError",
    "ServiceError",
    "WrappedError",
    "ConfigurationError",
    "OperationStateError",
    "configure_sentry",
]
