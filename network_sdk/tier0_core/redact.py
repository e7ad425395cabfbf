"""
network_sdk.tier0_core.redact
──────────────────────────────
Keeps credentials out of network logs.

Three entry points, one per thing the operation logs:
    redact_headers(headers)            request headers before they are logged
    scrub_diagnostic(text, headers)    the one-line error diagnostic
    structlog_redact_processor         last line of defence on every event dict
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

REDACTED = "[REDACTED]"

# Header names whose values are credentials (compared lower-cased).
SENSITIVE_HEADERS: frozenset[str] = frozenset({
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "x-auth-token",
    "x-csrf-token",
})

# Body and event-dict keys whose values are credentials.
SENSITIVE_FIELDS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "access_token",
    "refresh_token",
    "api_key",
    "client_secret",
}) | SENSITIVE_HEADERS

_CREDENTIAL_SCHEMES = re.compile(r"\b(Bearer|Basic|Token)\s+[A-Za-z0-9\-._~+/]+=*", re.I)
_JSON_SECRET = re.compile(
    r'("(?:password|secret|token|access_token|refresh_token|api_key|client_secret)"\s*:\s*)"[^"]*"',
    re.I,
)
_QUERY_SECRET = re.compile(r"\b(password|secret|token|api[_-]?key)=[^\s&\"'#]+", re.I)


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of *headers* with credential values replaced by REDACTED."""
    return {k: REDACTED if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


def redact_dict(data: Mapping[str, Any], *, deep: bool = True) -> dict[str, Any]:
    """
    Copy of *data* with the values of SENSITIVE_FIELDS replaced by REDACTED.
    With *deep*, nested mappings and lists of mappings are redacted too.
    """
    out: dict[str, Any] = {}
    for k, v in data.items():
        if isinstance(k, str) and k.lower() in SENSITIVE_FIELDS:
            out[k] = REDACTED
        elif deep and isinstance(v, Mapping):
            out[k] = redact_dict(v)
        elif deep and isinstance(v, list):
            out[k] = [redact_dict(i) if isinstance(i, Mapping) else i for i in v]
        else:
            out[k] = v
    return out


def scrub_string(text: str) -> str:
    """Mask auth schemes, JSON secret fields and ``key=value`` secrets in *text*."""
    text = _CREDENTIAL_SCHEMES.sub(lambda m: f"{m.group(1)} {REDACTED}", text)
    text = _JSON_SECRET.sub(rf'\1"{REDACTED}"', text)
    return _QUERY_SECRET.sub(rf"\1={REDACTED}", text)


def scrub_diagnostic(text: str, headers: Mapping[str, str] | None = None) -> str:
    """
    Scrub an error diagnostic. Header pairs are rendered back to back with no
    separator, so the literal values of sensitive *headers* are masked first.
    """
    for name, value in (headers or {}).items():
        if value and name.lower() in SENSITIVE_HEADERS:
            text = text.replace(f"{name}={value}", f"{name}={REDACTED}")
    return scrub_string(text)


def structlog_redact_processor(logger: Any, method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    return redact_dict(event_dict)


__all__ = [
    "REDACTED",
    "SENSITIVE_HEADERS",
    "SENSITIVE_FIELDS",
    "redact_headers",
    "redact_dict",
    "scrub_string",
    "scrub_diagnostic",
    "structlog_redact_processor",
]
