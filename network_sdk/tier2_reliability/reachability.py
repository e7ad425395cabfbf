"""
network_sdk.tier2_reliability.reachability
───────────────────────────────────────────
Network reachability: a quick yes/no answer an operation asks for before it
sends anything. A probe that cannot tell is treated as reachable, so only a
definite "no" short-circuits a request.

Configure via: NETWORK_REACHABILITY_BACKEND=always|socket|mock
               NETWORK_REACHABILITY_HOST, NETWORK_REACHABILITY_PORT,
               NETWORK_REACHABILITY_TIMEOUT
"""
from __future__ import annotations

import asyncio
import socket
from typing import Protocol, runtime_checkable

from network_sdk.tier0_core.config import get_config
from network_sdk.tier0_core.errors import ConfigurationError
from network_sdk.tier0_core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ReachabilityProvider(Protocol):
    async def is_reachable(self) -> bool: ...


class AlwaysReachable:
    """Never blocks a request. Default when no probe is configured."""

    async def is_reachable(self) -> bool:
        return True


class MockReachability:
    """Fixed answer for tests; flip ``reachable`` to simulate going offline."""

    def __init__(self, reachable: bool = True) -> None:
        self.reachable = reachable
        self.checks = 0

    async def is_reachable(self) -> bool:
        self.checks += 1
        return self.reachable


class SocketReachability:
    """
    TCP connect probe. Runs the blocking connect in a worker thread.
    Requires nothing beyond a resolvable host; defaults to a public DNS
    resolver on port 53.
    """

    def __init__(self, host: str, port: int, timeout: float = 1.5) -> None:
        self._host = host
        self._port = port
        self._timeout = timeout

    def _probe(self) -> bool:
        try:
            with socket.create_connection((self._host, self._port), timeout=self._timeout):
                return True
        except OSError as exc:
            logger.info(
                "network.reachability.unreachable",
                host=self._host,
                port=self._port,
                reason=str(exc),
            )
            return False

    async def is_reachable(self) -> bool:
        return await asyncio.to_thread(self._probe)


# ── Provider registry ─────────────────────────────────────────────────────────

_provider: ReachabilityProvider | None = None


def _build_provider() -> ReachabilityProvider:
    cfg = get_config()
    name = cfg.reachability_backend.lower()
    if name == "always":
        return AlwaysReachable()
    if name == "mock":
        return MockReachability()
    if name == "socket":
        return SocketReachability(
            cfg.reachability_host, cfg.reachability_port, cfg.reachability_timeout
        )
    raise ConfigurationError(
        f"Unknown NETWORK_REACHABILITY_BACKEND={name!r}. Supported: always, socket, mock"
    )


def get_provider() -> ReachabilityProvider:
    global _provider
    if _provider is None:
        _provider = _build_provider()
    return _provider


def _reset_provider() -> None:
    global _provider
    _provider = None


__all__ = [
    "ReachabilityProvider",
    "AlwaysReachable",
    "MockReachability",
    "SocketReachability",
    "get_provider",
]
