"""Configuration options for the Beyond Presence client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Mapping, Optional

from .transport import HttpPrimitive, RetryPolicy

DEFAULT_BASE_URL = "https://api.bey.dev"
DEFAULT_TIMEOUT_MS = 30000

ENV_API_KEY = "BEY_API_KEY"
ENV_BASE_URL = "BEY_BASE_URL"
ENV_TIMEOUT_MS = "BEY_TIMEOUT_MS"

LogCallback = Callable[..., None]


@dataclass(frozen=True)
class LoggerSink:
    """
    Optional logging callbacks, one per level.

    Each callback is called as ``callback(message, data)``. A missing slot drops
    that level; a callback that raises is ignored.
    """

    debug: Optional[LogCallback] = None
    info: Optional[LogCallback] = None
    warn: Optional[LogCallback] = None
    error: Optional[LogCallback] = None

    def emit(self, level: str, message: str, data: Any = None) -> None:
        callback = getattr(self, level, None)
        if callback is None:
            return
        try:
            callback(message, data)
        except Exception:
            # Don't let callback errors propagate
            pass

    @classmethod
    def from_logging(cls, logger: logging.Logger) -> "LoggerSink":
        """Route SDK log lines into a standard library logger."""

        def _bind(level: int) -> LogCallback:
            def _log(message: str, data: Any = None) -> None:
                if data is None:
                    logger.log(level, message)
                else:
                    logger.log(level, "%s %s", message, data)

            return _log

        return cls(
            debug=_bind(logging.DEBUG),
            info=_bind(logging.INFO),
            warn=_bind(logging.WARNING),
            error=_bind(logging.ERROR),
        )


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable configuration for an ApiClient.

    Attributes:
        api_key: API key sent in the ``x-api-key`` header of every request.
        base_url: Root URL of the API.
        timeout_ms: Per-request timeout in milliseconds.
        logger: Optional logging callbacks.
        http: Optional replacement for the default aiohttp request function.
        retry: Retry policy for transient failures.
    """

    api_key: str = field(default="", repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    logger: Optional[LoggerSink] = None
    http: Optional[HttpPrimitive] = None
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key:
            raise ValueError("Missing API key")
        if not self.base_url:
            raise ValueError("Missing base URL")
        if isinstance(self.timeout_ms, bool) or not isinstance(self.timeout_ms, int):
            raise ValueError("timeout_ms must be an integer")
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

    def with_api_key(self, api_key: str) -> "ClientConfig":
        """Return a copy of this config using a different API key."""
        return replace(self, api_key=api_key)


CONFIG_FIELDS = tuple(f.name for f in fields(ClientConfig))


class ClientConfigBuilder:
    """Builder for constructing ClientConfig with fluent interface."""

    def __init__(self):
        self._values: dict[str, Any] = {}

    def with_api_key(self, api_key: str) -> "ClientConfigBuilder":
        self._values["api_key"] = api_key
        return self

    def with_base_url(self, base_url: str) -> "ClientConfigBuilder":
        self._values["base_url"] = base_url
        return self

    def with_timeout_ms(self, timeout_ms: int) -> "ClientConfigBuilder":
        self._values["timeout_ms"] = timeout_ms
        return self

    def with_logger(self, logger: LoggerSink) -> "ClientConfigBuilder":
        """Set the logging callbacks."""
        self._values["logger"] = logger
        return self

    def with_http(self, http: HttpPrimitive) -> "ClientConfigBuilder":
        """Replace the underlying HTTP request function (mainly for tests)."""
        self._values["http"] = http
        return self

    def with_retry(self, retry: RetryPolicy) -> "ClientConfigBuilder":
        self._values["retry"] = retry
        return self

    def build(self) -> ClientConfig:
        """Build and return the configured ClientConfig."""
        return ClientConfig(**self._values)


def config_from_env(
    environ: Optional[Mapping[str, str]] = None, **overrides: Any
) -> ClientConfig:
    """
    Build a ClientConfig from BEY_API_KEY, BEY_BASE_URL and BEY_TIMEOUT_MS.

    Keyword overrides take precedence over the environment.

    Raises:
        ValueError: If BEY_API_KEY is missing or BEY_TIMEOUT_MS is not an integer.
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}

    api_key = env.get(ENV_API_KEY, "").strip()
    if api_key:
        values["api_key"] = api_key
    elif "api_key" not in overrides:
        raise ValueError(f"Missing required env var: {ENV_API_KEY}")

    base_url = env.get(ENV_BASE_URL, "").strip()
    if base_url:
        values["base_url"] = base_url

    timeout = env.get(ENV_TIMEOUT_MS, "").strip()
    if timeout:
        try:
            values["timeout_ms"] = int(timeout)
        except ValueError as e:
            raise ValueError(f"{ENV_TIMEOUT_MS} must be an integer, got {timeout!r}") from e

    values.update(overrides)
    return ClientConfig(**values)
