"""
network_sdk test configuration.

All tests run with mock providers by default; no network required.
Requests are served in-process by httpx.MockTransport.
"""
from __future__ import annotations

import os

import pytest

# ── Force mock providers for all tests ────────────────────────────────────
# These must be set before any network_sdk modules are imported.

os.environ.setdefault("NETWORK_ALERT_BACKEND", "mock")
os.environ.setdefault("NETWORK_REACHABILITY_BACKEND", "mock")
os.environ.setdefault("NETWORK_ERROR_BACKEND", "none")
os.environ.setdefault("NETWORK_LOG_LEVEL", "WARNING")


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """
    Reset all cached provider singletons between tests.
    This ensures each test gets a fresh provider with no state bleed.
    """
    from network_sdk.tier0_core.config import _reset_config
    import network_sdk.tier2_reliability.alerts as _alerts
    import network_sdk.tier2_reliability.reachability as _reachability
    import network_sdk.tier3_platform.dispatcher as _dispatcher
    import network_sdk.tier3_platform.transport as _transport

    yield

    _reset_config()
    _alerts._reset_presenter()
    _reachability._reset_provider()
    _dispatcher._reset_service()
    _transport._reset_transport()


@pytest.fixture
def alerts():
    """AlertPresenter over a recording sink; read ``alerts.sink.presented``."""
    from network_sdk.tier2_reliability.alerts import AlertPresenter, MockAlertSink
    return AlertPresenter(MockAlertSink())


@pytest.fixture
def make_transport():
    """
    Build an HttpxTransport whose requests are answered by *handler*.
    The returned transport exposes the handler's call log as ``.calls``.
    """
    import httpx

    from network_sdk.tier2_reliability.reachability import MockReachability
    from network_sdk.tier3_platform.transport import HttpxTransport

    def _make(handler=None, *, reachable: bool = True, status: int = 200, body: bytes = b""):
        calls: list[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if handler is not None:
                return handler(request)
            return httpx.Response(status, content=body)

        transport = HttpxTransport(
            transport=httpx.MockTransport(_handler),
            reachability=MockReachability(reachable),
        )
        transport.calls = calls  # type: ignore[attr-defined]
        return transport

    return _make
