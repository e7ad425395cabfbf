"""
network_sdk.tier3_platform.transport
─────────────────────────────────────
The wire: issue one HTTP request and hand back exactly one response or one
transport-level error. No retries, no status interpretation; the operation
classifies what comes back.

Backed by: httpx (async HTTP). One client serves plain JSON calls and a
second one serves multipart uploads, which run with a longer timeout.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx

from network_sdk.tier0_core.http import HTTPMethod
from network_sdk.tier2_reliability.reachability import ReachabilityProvider
from network_sdk.tier2_reliability.reachability import get_provider as get_reachability


# ── Data models ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TransportRequest:
    url: str
    method: HTTPMethod
    headers: Mapping[str, str]
    body: bytes = b""
    timeout: float = 25.0
    multipart: bool = False
    form: Mapping[str, str] | None = None
    files: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class RequestSnapshot:
    """What actually went out on the wire."""
    url: str
    method: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def of(cls, request: TransportRequest) -> RequestSnapshot:
        return cls(
            url=request.url,
            method=request.method.value,
            headers=dict(request.headers),
            body=request.body,
        )


@dataclass(frozen=True)
class TransportResponse:
    request: RequestSnapshot
    status: int | None = None
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    error: BaseException | None = None


# ── Protocol ───────────────────────────────────────────────────────────────

@runtime_checkable
class Transport(Protocol):
    async def is_reachable(self) -> bool: ...

    async def send(self, request: TransportRequest) -> TransportResponse: ...


# ── httpx transport ────────────────────────────────────────────────────────

class HttpxTransport:
    """
    Usage::

        transport = HttpxTransport()
        response = await transport.send(TransportRequest(url=..., method=HTTPMethod.GET, headers={}))
        await transport.aclose()

    Pass ``transport=httpx.MockTransport(handler)`` to serve requests
    in-process (tests, offline development).
    """

    def __init__(
        self,
        *,
        reachability: ReachabilityProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        follow_redirects: bool = True,
    ) -> None:
        self._reachability = reachability
        self._httpx_transport = transport
        self._follow_redirects = follow_redirects
        self._client: httpx.AsyncClient | None = None
        self._multipart_client: httpx.AsyncClient | None = None

    @property
    def reachability(self) -> ReachabilityProvider:
        if self._reachability is None:
            self._reachability = get_reachability()
        return self._reachability

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._httpx_transport,
            follow_redirects=self._follow_redirects,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._new_client()
        return self._client

    @property
    def multipart_client(self) -> httpx.AsyncClient:
        if self._multipart_client is None:
            self._multipart_client = self._new_client()
        return self._multipart_client

    async def is_reachable(self) -> bool:
        return await self.reachability.is_reachable()

    async def send(self, request: TransportRequest) -> TransportResponse:
        client = self.multipart_client if request.multipart else self.client
        headers = dict(request.headers)
        kwargs: dict[str, Any] = {}
        if request.files:
            # httpx writes the multipart boundary into Content-Type itself.
            headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
            kwargs["data"] = dict(request.form or {})
            kwargs["files"] = dict(request.files)
        elif request.body:
            kwargs["content"] = request.body

        try:
            response = await client.request(
                request.method.value,
                request.url,
                headers=headers,
                timeout=request.timeout,
                **kwargs,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return TransportResponse(request=RequestSnapshot.of(request), error=exc)

        return TransportResponse(
            request=_snapshot(response.request),
            status=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        for client in (self._client, self._multipart_client):
            if client is not None:
                await client.aclose()
        self._client = None
        self._multipart_client = None

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _snapshot(sent: httpx.Request) -> RequestSnapshot:
    try:
        body = sent.content
    except httpx.RequestNotRead:
        # Streamed multipart bodies are not buffered.
        body = b""
    return RequestSnapshot(
        url=str(sent.url),
        method=sent.method,
        headers=dict(sent.headers),
        body=body,
    )


# ── Provider registry ──────────────────────────────────────────────────────

_transport: Transport | None = None


def get_transport() -> Transport:
    global _transport
    if _transport is None:
        _transport = HttpxTransport()
    return _transport


def set_transport(transport: Transport) -> None:
    global _transport
    _transport = transport


def _reset_transport() -> None:
    global _transport
    _transport = None


__all__ = [
    "TransportRequest",
    "RequestSnapshot",
    "TransportResponse",
    "Transport",
    "HttpxTransport",
    "get_transport",
    "set_transport",
]
