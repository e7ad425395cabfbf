"""
network_sdk.tier2_reliability.alerts
─────────────────────────────────────
User-facing failure alerts. The network layer never talks to a UI toolkit;
it hands a message to an AlertSink through the AlertPresenter, which queues
it and shows one alert at a time on the event loop.

Presentation is fire-and-forget: present() returns immediately, and a sink
that fails is logged, never reported back to the operation that asked.

Configure via: NETWORK_ALERT_BACKEND=log|mock
"""
from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Protocol, runtime_checkable

from network_sdk.tier0_core.config import get_config
from network_sdk.tier0_core.errors import ConfigurationError
from network_sdk.tier0_core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class AlertSink(Protocol):
    """Shows *message* to the user. May be sync or async."""

    def present(self, message: str) -> None | Awaitable[None]: ...


# ── Sinks ─────────────────────────────────────────────────────────────────────

class LogAlertSink:
    """Headless sink: alerts become warning log records."""

    def present(self, message: str) -> None:
        logger.warning("network.alert.presented", message=message)


class MockAlertSink:
    """Records every message for assertions."""

    def __init__(self) -> None:
        self.presented: list[str] = []

    def present(self, message: str) -> None:
        self.presented.append(message)


# ── Presenter ─────────────────────────────────────────────────────────────────

class AlertPresenter:
    """
    Serialises alerts from concurrent operations onto one sink.

    Usage::

        presenter = AlertPresenter(MockAlertSink())
        presenter.present("No internet connection.")
        await presenter.drain()
    """

    def __init__(self, sink: AlertSink) -> None:
        self.sink = sink
        self._queue: asyncio.Queue[str] | None = None
        self._consumer: asyncio.Task[Any] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def present(self, message: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: nothing to serialise against, show it now.
            self._show_sync(message)
            return
        if (
            self._queue is None
            or self._consumer is None
            or self._consumer.done()
            or self._loop is not loop
        ):
            self._loop = loop
            self._queue = asyncio.Queue()
            self._consumer = loop.create_task(self._consume(self._queue))
        self._queue.put_nowait(message)

    def _show_sync(self, message: str) -> None:
        try:
            result = self.sink.present(message)
            if inspect.isawaitable(result):
                asyncio.run(result)  # type: ignore[arg-type]
        except Exception:
            logger.exception("network.alert.sink_failed", message=message)

    async def _consume(self, queue: asyncio.Queue[str]) -> None:
        while True:
            message = await queue.get()
            try:
                result = self.sink.present(message)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("network.alert.sink_failed", message=message)
            finally:
                queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued alert has been shown."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        await self.drain()
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None
            self._queue = None
            self._loop = None


# ── Provider registry ─────────────────────────────────────────────────────────

_presenter: AlertPresenter | None = None


def _build_sink() -> AlertSink:
    name = get_config().alert_backend.lower()
    if name == "log":
        return LogAlertSink()
    if name == "mock":
        return MockAlertSink()
    raise ConfigurationError(f"Unknown NETWORK_ALERT_BACKEND={name!r}. Supported: log, mock")


def get_presenter() -> AlertPresenter:
    global _presenter
    if _presenter is None:
        _presenter = AlertPresenter(_build_sink())
    return _presenter


def _reset_presenter() -> None:
    global _presenter
    _presenter = None


__all__ = [
    "AlertSink",
    "LogAlertSink",
    "MockAlertSink",
    "AlertPresenter",
    "get_presenter",
]
