"""
Beyond Presence client - async SDK for the Beyond Presence REST API

This package provides typed access to avatars and real-time avatar sessions,
with schema validation, retry with exponential backoff and a single
normalized error type.
"""

from .client import ROUTES, ApiClient, Route
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_MS,
    ClientConfig,
    ClientConfigBuilder,
    LoggerSink,
    config_from_env,
)
from .errors import ApiError, ApiErrorKind
from .schemas import (
    Avatar,
    CreateSessionRequest,
    SchemaRegistry,
    SchemaValidationError,
    Session,
    Validator,
)
from .sdk import AvatarsResource, BeyondSDK, SessionsResource, create_beyond_sdk
from .transport import (
    AiohttpPrimitive,
    HttpPrimitive,
    HttpResponse,
    RetryPolicy,
    Transport,
    generate_request_id,
)

__version__ = "0.1.0"

__all__ = [
    "BeyondSDK",
    "create_beyond_sdk",
    "AvatarsResource",
    "SessionsResource",
    "ApiClient",
    "Route",
    "ROUTES",
    "ApiError",
    "ApiErrorKind",
    "ClientConfig",
    "ClientConfigBuilder",
    "LoggerSink",
    "config_from_env",
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT_MS",
    "Avatar",
    "Session",
    "CreateSessionRequest",
    "SchemaRegistry",
    "SchemaValidationError",
    "Validator",
    "Transport",
    "RetryPolicy",
    "HttpPrimitive",
    "HttpResponse",
    "AiohttpPrimitive",
    "generate_request_id",
]
