"""
network_sdk
───────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from network_sdk.tier0_core.logging import get_logger
from network_sdk.tier0_core.errors import (
    NetworkError,
    OperationFailedError,
    NetworkConnectionError,
    ServiceError,
    ServiceErrorPayload,
    WrappedError,
    ConfigurationError,
    OperationStateError,
)
from network_sdk.tier0_core.config import get_config, NetworkConfig
from network_sdk.tier0_core.http import HTTP, HTTPMethod, Result

from network_sdk.tier1_runtime.request import RequestDescriptor
from network_sdk.tier1_runtime.serialize import (
    JsonCodec,
    ServiceModel,
    EmptyResponse,
    DecodeError,
    serialize,
    deserialize,
)

from network_sdk.tier2_reliability.alerts import AlertSink, AlertPresenter, get_presenter
from network_sdk.tier2_reliability.reachability import ReachabilityProvider

from network_sdk.tier3_platform.transport import HttpxTransport, Transport, get_transport
from network_sdk.tier3_platform.operation import NetworkOperation, OperationState
from network_sdk.tier3_platform.dispatcher import NetworkService, get_service

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger",
    # errors
    "NetworkError", "OperationFailedError", "NetworkConnectionError",
    "ServiceError", "ServiceErrorPayload", "WrappedError",
    "ConfigurationError", "OperationStateError",
    # config
    "get_config", "NetworkConfig",
    # http
    "HTTP", "HTTPMethod", "Result",
    # request
    "RequestDescriptor",
    # serialize
    "JsonCodec", "ServiceModel", "EmptyResponse", "DecodeError",
    "serialize", "deserialize",
    # alerts
    "AlertSink", "AlertPresenter", "get_presenter",
    # reachability
    "ReachabilityProvider",
    # transport
    "HttpxTransport", "Transport", "get_transport",
    # operation
    "NetworkOperation", "OperationState",
    # dispatcher
    "NetworkService", "get_service",
]
