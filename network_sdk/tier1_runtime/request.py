"""
network_sdk.tier1_runtime.request
──────────────────────────────────
Declarative description of one HTTP call: where it goes, how it is sent,
and whether failures are shown to the user.

Specialise by subclassing and overriding field defaults::

    @dataclass(frozen=True)
    class GetUserRequest(RequestDescriptor):
        host: str = "https://api.example.com"
        route: str = "/users/me"
        method: HTTPMethod = HTTPMethod.GET
"""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from network_sdk.tier0_core.config import get_config
from network_sdk.tier0_core.http import HTTPMethod


def default_headers() -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "accept": "application/json",
    }


@dataclass(frozen=True)
class RequestDescriptor:
    host: str = ""
    route: str = ""
    method: HTTPMethod = HTTPMethod.POST
    headers: Mapping[str, str] = field(default_factory=default_headers)
    timeout: float = field(default_factory=lambda: get_config().timeout)
    multipart_timeout: float = field(default_factory=lambda: get_config().multipart_timeout)
    is_multipart: bool = False
    alert_on_error: bool = True

    def __post_init__(self) -> None:
        # Freeze the header mapping; insertion order is kept.
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "method", HTTPMethod(self.method))

    @property
    def url(self) -> str:
        return self.host + self.route

    @property
    def effective_timeout(self) -> float:
        return self.multipart_timeout if self.is_multipart else self.timeout

    def replace(self, **changes: Any) -> RequestDescriptor:
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def with_headers(self, extra: Mapping[str, str]) -> RequestDescriptor:
        """Return a copy with *extra* headers added after the existing ones."""
        return self.replace(headers={**self.headers, **extra})


__all__ = ["RequestDescriptor", "default_headers"]
