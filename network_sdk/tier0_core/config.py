"""
network_sdk.tier0_core.config
──────────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic. Invalid values raise at
first access of get_config(), not in the middle of a request.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from network_sdk.tier0_core.errors import (
    DEFAULT_CONNECTION_ERROR_MESSAGE,
    DEFAULT_ERROR_MESSAGE,
)

# yyyy-MM-dd'T'HH:mm:ss.SSSZ
SERVICE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


class NetworkConfig(BaseSettings):
    """
    Typed network configuration. All env vars are prefixed with NETWORK_.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Requests ──────────────────────────────────────────────────────────────
    timeout: float = Field(default=25.0, alias="NETWORK_TIMEOUT")
    multipart_timeout: float = Field(default=30.0, alias="NETWORK_MULTIPART_TIMEOUT")
    date_format: str = Field(default=SERVICE_DATE_FORMAT, alias="NETWORK_DATE_FORMAT")

    # ── Dispatcher ────────────────────────────────────────────────────────────
    max_concurrent_operations: int = Field(default=4, alias="NETWORK_MAX_CONCURRENT_OPERATIONS")
    token_request_available: bool = Field(default=False, alias="NETWORK_TOKEN_REQUEST_AVAILABLE")

    # ── Error presentation ────────────────────────────────────────────────────
    suppressed_error_keys: Annotated[frozenset[str], NoDecode] = Field(
        default=frozenset(), alias="NETWORK_SUPPRESSED_ERROR_KEYS"
    )
    default_error_message: str = Field(
        default=DEFAULT_ERROR_MESSAGE, alias="NETWORK_DEFAULT_ERROR_MESSAGE"
    )
    connection_error_message: str = Field(
        default=DEFAULT_CONNECTION_ERROR_MESSAGE, alias="NETWORK_CONNECTION_ERROR_MESSAGE"
    )
    alert_backend: str = Field(default="log", alias="NETWORK_ALERT_BACKEND")

    # ── Reachability ──────────────────────────────────────────────────────────
    reachability_backend: str = Field(default="always", alias="NETWORK_REACHABILITY_BACKEND")
    reachability_host: str = Field(default="1.1.1.1", alias="NETWORK_REACHABILITY_HOST")
    reachability_port: int = Field(default=53, alias="NETWORK_REACHABILITY_PORT")
    reachability_timeout: float = Field(default=1.5, alias="NETWORK_REACHABILITY_TIMEOUT")

    # ── Logging / telemetry ───────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="NETWORK_LOG_LEVEL")
    log_format: str = Field(default="json", alias="NETWORK_LOG_FORMAT")
    error_backend: str = Field(default="none", alias="NETWORK_ERROR_BACKEND")
    metrics_enabled: bool = Field(default=True, alias="NETWORK_METRICS_ENABLED")

    @field_validator("suppressed_error_keys", mode="before")
    @classmethod
    def split_keys(cls, v: Any) -> Any:
        if isinstance(v, str):
            return frozenset(k.strip() for k in v.split(",") if k.strip())
        return v

    @field_validator("timeout", "multipart_timeout", "reachability_timeout")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeouts must be positive, got {v!r}")
        return v

    @field_validator("max_concurrent_operations")
    @classmethod
    def at_least_one_worker(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_concurrent_operations must be >= 1, got {v!r}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "console"}
        if v.lower() not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got {v!r}")
        return v.lower()


@lru_cache(maxsize=1)
def get_config() -> NetworkConfig:
    """
    Return the singleton network config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return NetworkConfig()


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()


__all__ = ["NetworkConfig", "get_config", "SERVICE_DATE_FORMAT"]
