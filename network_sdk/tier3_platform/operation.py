"""
network_sdk.tier3_platform.operation
─────────────────────────────────────
One HTTP request lifecycle as a small state machine:

    NONE → READY → EXECUTING → FINISHED

start() checks reachability, sends the request, classifies the response by
status, decodes either the expected model or a ServiceErrorPayload, shows an
alert when the request asks for it, and calls the completion exactly once.
Nothing is raised to the caller for transport or decoding problems; every
failure arrives as Result.failure(NetworkError).

Usage::

    op = NetworkOperation(
        GetUserRequest(),
        response_model=User,
        completion=lambda result: print(result.ok),
    )
    result = await op.run()
"""
from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from network_sdk.tier0_core.config import NetworkConfig, get_config
from network_sdk.tier0_core.errors import (
    ConfigurationError,
    NetworkConnectionError,
    NetworkError,
    OperationFailedError,
    OperationStateError,
    ServiceError,
    ServiceErrorPayload,
    WrappedError,
)
from network_sdk.tier0_core.http import (
    EMPTY_RESPONSE_CODES,
    MISSING_STATUS,
    NO_BODY_CODES,
    HTTPMethod,
    Result,
    is_success,
)
from network_sdk.tier0_core.logging import get_logger
from network_sdk.tier0_core.metrics import observe_request, record_outcome
from network_sdk.tier0_core.redact import redact_headers, scrub_diagnostic, scrub_string
from network_sdk.tier1_runtime.request import RequestDescriptor
from network_sdk.tier1_runtime.serialize import (
    DecodeError,
    EmptyResponse,
    JsonCodec,
    default_instance,
)
from network_sdk.tier2_reliability.alerts import AlertPresenter, get_presenter
from network_sdk.tier3_platform.transport import (
    Transport,
    TransportRequest,
    TransportResponse,
    get_transport,
)

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

Completion = Callable[[Result[T]], None]


class OperationState(str, Enum):
    NONE = "none"
    READY = "ready"
    EXECUTING = "executing"
    FINISHED = "finished"


_ORDER = {
    OperationState.NONE: 0,
    OperationState.READY: 1,
    OperationState.EXECUTING: 2,
    OperationState.FINISHED: 3,
}


class NetworkOperation(Generic[T]):
    def __init__(
        self,
        request: RequestDescriptor,
        request_model: BaseModel | dict | list | None = None,
        completion: Completion[T] | None = None,
        *,
        response_model: Type[T] = EmptyResponse,  # type: ignore[assignment]
        files: Mapping[str, Any] | None = None,
        transport: Transport | None = None,
        alerts: AlertPresenter | None = None,
        codec: JsonCodec | None = None,
        suppressed_error_keys: Iterable[str] | None = None,
        config: NetworkConfig | None = None,
    ) -> None:
        cfg = config or get_config()
        self.request = request
        self.request_model = request_model
        self.completion = completion
        self.response_model = response_model
        self.files = files
        self.transport = transport or get_transport()
        self.alerts = alerts or get_presenter()
        self.codec = codec or JsonCodec(cfg.date_format)
        self.suppressed_error_keys = frozenset(
            cfg.suppressed_error_keys if suppressed_error_keys is None else suppressed_error_keys
        )
        self._default_message = cfg.default_error_message
        self._connection_message = cfg.connection_error_message
        self._state = OperationState.NONE
        self._result: Result[T] | None = None
        self._finished = asyncio.Event()

    def __repr__(self) -> str:
        return (
            f"<NetworkOperation {self.request.method.value} {self.request.url} "
            f"state={self._state.value}>"
        )

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def state(self) -> OperationState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is OperationState.READY

    @property
    def is_executing(self) -> bool:
        return self._state is OperationState.EXECUTING

    @property
    def is_finished(self) -> bool:
        return self._state is OperationState.FINISHED

    @property
    def result(self) -> Result[T] | None:
        return self._result

    def _transition(self, new: OperationState) -> None:
        if _ORDER[new] <= _ORDER[self._state]:
            raise OperationStateError(
                f"cannot move operation from {self._state.value} to {new.value}"
            )
        self._state = new

    def mark_ready(self) -> None:
        """Called by the dispatcher when the operation is admitted."""
        self._transition(OperationState.READY)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def start(self) -> None:
        if self._state in (OperationState.EXECUTING, OperationState.FINISHED):
            logger.warning("network.operation.start_ignored", url=self.request.url, state=self._state.value)
            return

        reachable = await self.transport.is_reachable()
        # Someone else may have started us while we were waiting.
        if self._state in (OperationState.EXECUTING, OperationState.FINISHED):
            return

        if not reachable:
            logger.warning("network.operation.unreachable", url=self.request.url)
            error = NetworkConnectionError(self._connection_message)
            self._finish(Result.failure(error), alert=error.message)
            return

        self._transition(OperationState.EXECUTING)
        await self.perform_request()

    async def wait(self) -> Result[T]:
        """Block until the operation has finished and return its result."""
        await self._finished.wait()
        assert self._result is not None
        return self._result

    async def run(self) -> Result[T]:
        await self.start()
        return await self.wait()

    def _finish(self, result: Result[T], alert: str | None = None) -> None:
        if self._state is OperationState.FINISHED:
            return
        self._transition(OperationState.FINISHED)
        self._result = result
        record_outcome("success" if result.ok else result.error.kind)  # type: ignore[union-attr]
        logger.info(
            "network.operation.finished",
            url=self.request.url,
            ok=result.ok,
            error_kind=None if result.ok else result.error.kind,  # type: ignore[union-attr]
        )
        try:
            if alert is not None and self.request.alert_on_error:
                self.alerts.present(alert)
            if self.completion is not None:
                self.completion(result)
        finally:
            self._finished.set()

    # ── Request ───────────────────────────────────────────────────────────────

    def build_transport_request(self) -> TransportRequest:
        if self.files:
            body = b""
            form = self.codec.form_fields(self.request_model)  # type: ignore[arg-type]
        else:
            body = self.codec.encode(self.request_model)
            form = None
        return TransportRequest(
            url=self.request.url,
            method=self.request.method,
            headers=self.request.headers,
            body=body,
            timeout=self.request.effective_timeout,
            multipart=self.request.is_multipart,
            form=form,
            files=self.files,
        )

    async def perform_request(self) -> None:
        try:
            transport_request = self.build_transport_request()
        except (TypeError, ValueError, PydanticSerializationError) as exc:
            logger.warning("network.request.encode_failed", url=self.request.url, reason=str(exc))
            self._finish(Result.failure(WrappedError(exc, self._default_message)))
            return

        logger.info(
            "network.request.performing",
            url=transport_request.url,
            method=transport_request.method.value,
            multipart=transport_request.multipart,
            timeout=transport_request.timeout,
        )
        logger.debug(
            "network.request.params",
            headers=redact_headers(transport_request.headers),
            body=scrub_string(transport_request.body.decode("utf-8", errors="replace")),
        )

        started = time.monotonic()
        response = await self.transport.send(transport_request)
        observe_request(transport_request.method.value, time.monotonic() - started)

        self.handle_response(response)

    # ── Response ──────────────────────────────────────────────────────────────

    def handle_response(self, response: TransportResponse) -> None:
        logger.info(
            "network.response.received",
            url=self.request.url,
            status=response.status,
            error=None if response.error is None else repr(response.error),
        )
        status = response.status if response.status is not None else MISSING_STATUS
        if is_success(status):
            self.handle_success(status, response.body)
        else:
            self.handle_error(
                response.body,
                response.error,
                status,
                self.create_error_str(response),
            )

    def create_error_str(self, response: TransportResponse) -> str:
        """Request and response rendered into one line for logs. Never parsed."""
        sent = response.request
        out = f"{sent.method} {sent.url}#"
        out += "".join(f"{k}={v}" for k, v in sent.headers.items()) + "#"
        if sent.body:
            out += sent.body.decode("utf-8", errors="replace") + "#"
        if response.body:
            out += "result: custom error response: " + response.body.decode("utf-8", errors="replace")
        else:
            out += f"result: error: {response.error!r}"
        return out

    def _is_empty(self, status: int, body: bytes) -> bool:
        return (
            status in NO_BODY_CODES
            or self.request.method is HTTPMethod.HEAD
            or not body.strip()
        )

    def handle_success(self, status: int, body: bytes) -> None:
        if self._is_empty(status, body):
            logger.info(
                "network.response.empty_success",
                status=status,
                expected=status in EMPTY_RESPONSE_CODES,
            )
            try:
                value = default_instance(self.response_model)
            except ConfigurationError as exc:
                logger.error(
                    "network.response.no_default",
                    model=self.response_model.__name__,
                    reason=str(exc),
                )
                self._finish(Result.failure(WrappedError(exc, self._default_message)))
                return
            self._finish(Result.success(value))
            return

        logger.debug("network.response.success", body=scrub_string(body.decode("utf-8", errors="replace")))
        try:
            value = self.codec.decode(body, self.response_model)
        except DecodeError as exc:
            logger.warning("network.response.decode_failed", model=self.response_model.__name__, reason=str(exc))
            self._finish(Result.failure(WrappedError(exc, self._default_message)))
            return
        self._finish(Result.success(value))

    def handle_error(
        self,
        body: bytes,
        error: BaseException | None,
        status: int,
        error_str: str,
    ) -> None:
        logger.warning(
            "network.response.error",
            status=status,
            diagnostic=scrub_diagnostic(error_str, self.request.headers),
        )

        if body.strip():
            try:
                payload = self.codec.decode(body, ServiceErrorPayload)
            except DecodeError as exc:
                logger.warning("network.response.decode_failed", model="ServiceErrorPayload", reason=str(exc))
                self._finish(Result.failure(WrappedError(exc, self._default_message)))
                return

            service_error = ServiceError(payload, self._default_message, status_code=status)
            logger.info("network.response.service_error", status=status, error_key=payload.error_key)
            self._finish(Result.failure(service_error), alert=self._alert_for(service_error, status))
            return

        failure: NetworkError
        # Empty body: a transport error is kept as the cause instead of being
        # collapsed into OperationFailedError. The alert is the same either way.
        if error is not None:
            failure = WrappedError(error, self._default_message, status_code=status)
        else:
            failure = OperationFailedError(self._default_message, status_code=status)
        self._finish(Result.failure(failure), alert=self._default_message)

    def _alert_for(self, error: ServiceError, status: int) -> str | None:
        # Server-side failures are never shown verbatim.
        if status >= 500:
            return self._default_message
        if error.error_key is not None and error.error_key in self.suppressed_error_keys:
            logger.info("network.alert.suppressed", error_key=error.error_key)
            return None
        return error.message


__all__ = ["OperationState", "NetworkOperation", "Completion"]
