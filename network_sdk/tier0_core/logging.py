"""
network_sdk.tier0_core.logging
───────────────────────────────
structlog setup for the network layer. Events are dotted names
(``network.request.performing``) with keyword fields; credentials are
redacted by the last processor before rendering.

Configure via: NETWORK_LOG_LEVEL, NETWORK_LOG_FORMAT=json|console
"""
from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from network_sdk.tier0_core.config import get_config
from network_sdk.tier0_core.redact import structlog_redact_processor

_ROOT = "network_sdk"
_configured = False


def _configure() -> None:
    cfg = get_config()
    level = getattr(logging, cfg.log_level.upper(), logging.INFO)

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog_redact_processor,
    ]
    renderer = (
        structlog.dev.ConsoleRenderer()
        if cfg.log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    # Only the package logger is touched; the host application owns the root.
    package_logger = logging.getLogger(_ROOT)
    package_logger.handlers = [handler]
    package_logger.setLevel(level)
    package_logger.propagate = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("network.request.performing", url=url, method="POST")
    """
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return structlog.get_logger(name or _ROOT)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach *fields* to every event logged inside the block (task-local)."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield


__all__ = ["get_logger", "log_context"]
