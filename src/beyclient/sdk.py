"""Public entry point grouping the API client into resource namespaces."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from .client import ApiClient
from .config import CONFIG_FIELDS, ClientConfig, ClientConfigBuilder
from .schemas import Avatar, CreateSessionRequest, Session, Validator


class AvatarsResource:
    """Avatar operations."""

    def __init__(self, client: ApiClient):
        self._client = client

    async def list(self) -> list[Avatar]:
        """
        List all avatars accessible with the configured API key.

        GET /v1/avatar
        """
        return await self._client.list_avatars()


class SessionsResource:
    """Session operations."""

    def __init__(self, client: ApiClient):
        self._client = client

    async def create(
        self, params: Union[CreateSessionRequest, Mapping[str, Any]]
    ) -> Session:
        """
        Create a new real-time session.

        POST /v1/session

        Args:
            params: avatar_id, livekit_url and livekit_token, as a
                CreateSessionRequest or a mapping. Validated before sending.
        """
        return await self._client.create_session(params)

    async def list(self) -> list[Session]:
        """
        List all sessions associated with the API key.

        GET /v1/session
        """
        return await self._client.list_sessions()

    async def get(self, session_id: str) -> Session:
        """
        Get details of a specific session.

        GET /v1/session/{sessionId}
        """
        return await self._client.get_session(session_id)


class BeyondSDK:
    """
    Beyond Presence SDK.

    Example:
        ```python
        sdk = create_beyond_sdk(api_key="your-api-key")

        avatars = await sdk.avatars.list()
        session = await sdk.sessions.create(
            {
                "avatar_id": avatars[0].id,
                "livekit_url": "wss://<your-domain>.livekit.cloud",
                "livekit_token": "<your-livekit-token>",
            }
        )
        ```
    """

    def __init__(self, client: ApiClient):
        self._client = client
        self.avatars = AvatarsResource(client)
        self.sessions = SessionsResource(client)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        validator: Optional[Validator] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> "BeyondSDK":
        return cls(ApiClient(config, validator=validator, sleep=sleep))

    @property
    def config(self) -> ClientConfig:
        return self._client.config

    @property
    def client(self) -> ApiClient:
        return self._client

    def set_api_key(self, api_key: str) -> "BeyondSDK":
        """Return a new SDK using ``api_key``; this instance is unaffected."""
        return BeyondSDK(self._client.set_api_key(api_key))


def create_beyond_sdk(**kwargs) -> BeyondSDK:
    """
    Create a BeyondSDK from keyword configuration.

    Args:
        **kwargs: ClientConfig fields (api_key, base_url, timeout_ms, logger,
            http, retry).

    Raises:
        TypeError: For unknown keyword arguments.
        ValueError: For invalid configuration (e.g. a missing API key).
    """
    unknown = sorted(set(kwargs) - set(CONFIG_FIELDS))
    if unknown:
        raise TypeError(f"Unknown configuration option(s): {', '.join(unknown)}")

    builder = ClientConfigBuilder()

    if "api_key" in kwargs:
        builder.with_api_key(kwargs["api_key"])
    if "base_url" in kwargs:
        builder.with_base_url(kwargs["base_url"])
    if "timeout_ms" in kwargs:
        builder.with_timeout_ms(kwargs["timeout_ms"])
    if "logger" in kwargs:
        builder.with_logger(kwargs["logger"])
    if "http" in kwargs:
        builder.with_http(kwargs["http"])
    if "retry" in kwargs:
        builder.with_retry(kwargs["retry"])

    return BeyondSDK.from_config(builder.build())
