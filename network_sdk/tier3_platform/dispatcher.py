"""
network_sdk.tier3_platform.dispatcher
──────────────────────────────────────
FIFO admission of network operations onto a fixed pool of asyncio worker
tasks. No priorities, no dependencies between operations, no cancellation
propagation: an admitted operation runs to one of its terminal outcomes.

Usage::

    async with NetworkService() as service:
        service.add(NetworkOperation(GetUserRequest(), response_model=User, completion=on_user))
        await service.join()
"""
from __future__ import annotations

import asyncio
from typing import Any

from network_sdk.tier0_core.config import NetworkConfig, get_config
from network_sdk.tier0_core.logging import get_logger, log_context
from network_sdk.tier3_platform.operation import NetworkOperation

logger = get_logger(__name__)


class NetworkService:
    def __init__(
        self,
        *,
        max_concurrent_operations: int | None = None,
        token_request_available: bool | None = None,
        config: NetworkConfig | None = None,
    ) -> None:
        cfg = config or get_config()
        self.max_concurrent_operations = max_concurrent_operations or cfg.max_concurrent_operations
        # Replaces a process-wide switch; read by callers that gate token requests.
        self.token_request_available = (
            cfg.token_request_available if token_request_available is None else token_request_available
        )
        self._queue: asyncio.Queue[NetworkOperation[Any]] | None = None
        self._workers: list[asyncio.Task[None]] = []
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    def add(self, operation: NetworkOperation[Any]) -> None:
        """
        Admit *operation*: mark it READY and queue it for a worker.
        Must be called from inside a running event loop.
        """
        queue = self._ensure_workers()
        operation.mark_ready()
        queue.put_nowait(operation)
        logger.debug("network.dispatcher.admitted", url=operation.request.url, pending=queue.qsize())

    def _ensure_workers(self) -> asyncio.Queue[NetworkOperation[Any]]:
        loop = asyncio.get_running_loop()
        if self._queue is None or self._loop is not loop:
            self._loop = loop
            self._queue = asyncio.Queue()
            self._workers = [
                loop.create_task(self._worker(i, self._queue), name=f"network-worker-{i}")
                for i in range(self.max_concurrent_operations)
            ]
        return self._queue

    async def _worker(self, index: int, queue: asyncio.Queue[NetworkOperation[Any]]) -> None:
        while True:
            operation = await queue.get()
            try:
                with log_context(worker=index):
                    await operation.start()
            except Exception:
                logger.exception(
                    "network.dispatcher.operation_failed",
                    worker=index,
                    url=operation.request.url,
                )
            finally:
                queue.task_done()

    async def join(self) -> None:
        """Wait until every admitted operation has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Finish queued work, then stop the workers."""
        await self.join()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
        self._loop = None

    async def __aenter__(self) -> NetworkService:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


# ── Shared instance ──────────────────────────────────────────────────────────

_service: NetworkService | None = None


def get_service() -> NetworkService:
    global _service
    if _service is None:
        _service = NetworkService()
    return _service


def _reset_service() -> None:
    global _service
    _service = None


__all__ = ["NetworkService", "get_service"]
