"""API client binding the route table to Transport and the schema registry."""

from __future__ import annotations

import asyncio
import string
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Union
from urllib.parse import quote

from pydantic import BaseModel

from .config import ClientConfig
from .errors import (
    INPUT_VALIDATION_STATUS,
    OUTPUT_VALIDATION_STATUS,
    ApiError,
    ApiErrorKind,
)
from .schemas import (
    AVATAR_LIST,
    CREATE_SESSION_REQUEST,
    SESSION,
    SESSION_LIST,
    Avatar,
    CreateSessionRequest,
    SchemaValidationError,
    Session,
    Validator,
    default_registry,
)
from .transport import Transport


@dataclass(frozen=True)
class Route:
    """One remote operation: method, path template and schemas."""

    name: str
    method: str
    path: str
    output_schema: str
    input_schema: Optional[str] = None

    @property
    def path_params(self) -> tuple[str, ...]:
        return tuple(
            field_name
            for _, field_name, _, _ in string.Formatter().parse(self.path)
            if field_name
        )

    def build_path(self, params: Mapping[str, Any]) -> str:
        """
        Substitute path parameters, percent-encoding each value.

        Raises:
            ApiError: If a parameter is missing, empty or not a string.
        """
        values = {}
        for param in self.path_params:
            value = params.get(param)
            if not isinstance(value, str) or not value:
                raise ApiError(
                    f"Invalid path parameter {param!r} for {self.name}: expected a non-empty string",
                    INPUT_VALIDATION_STATUS,
                    kind=ApiErrorKind.validation,
                )
            values[param] = quote(value, safe="")
        return self.path.format(**values)


LIST_AVATARS = "list_avatars"
LIST_SESSIONS = "list_sessions"
CREATE_SESSION = "create_session"
GET_SESSION = "get_session"

ROUTES: Mapping[str, Route] = {
    route.name: route
    for route in (
        Route(LIST_AVATARS, "GET", "/v1/avatar", output_schema=AVATAR_LIST),
        Route(LIST_SESSIONS, "GET", "/v1/session", output_schema=SESSION_LIST),
        Route(
            CREATE_SESSION,
            "POST",
            "/v1/session",
            output_schema=SESSION,
            input_schema=CREATE_SESSION_REQUEST,
        ),
        Route(GET_SESSION, "GET", "/v1/session/{sessionId}", output_schema=SESSION),
    )
}


def extract_error_message(body: Any, status: int) -> str:
    """Pick a readable message from an error body: ``message``, then ``error``."""
    if isinstance(body, dict):
        if body.get("message"):
            return str(body["message"])
        if body.get("error"):
            return str(body["error"])
    return f"API request failed with status {status}"


class ApiClient:
    """
    Typed access to the Beyond Presence REST API.

    Every call validates its input (when the route has an input schema), sends
    the request through Transport and validates the response body. Every
    failure is raised as ApiError.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        validator: Optional[Validator] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._config = config
        self._validator: Validator = validator if validator is not None else default_registry
        self._sleep = sleep
        self._transport = Transport(config, sleep=sleep)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    def set_api_key(self, api_key: str) -> "ApiClient":
        """
        Return a new client using ``api_key``.

        The config is copied with only the key replaced; this client is left
        untouched and keeps working with its own key.
        """
        return ApiClient(
            self._config.with_api_key(api_key),
            validator=self._validator,
            sleep=self._sleep,
        )

    async def call(
        self,
        route_name: str,
        *,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Run one route from the route table.

        Raises:
            KeyError: If ``route_name`` is not in the route table.
            ApiError: On invalid input, transport failure, non-2xx status or
                an invalid response body.
        """
        route = ROUTES[route_name]

        json_body = None
        if route.input_schema is not None:
            json_body = self._validate_input(route, body)

        path = route.build_path(params or {})
        response = await self._transport.request(route.method, path, json_body=json_body)

        if not response.ok:
            raise ApiError(
                extract_error_message(response.body, response.status),
                response.status,
                response.body,
                kind=ApiErrorKind.http,
            )

        try:
            return self._validator.validate(route.output_schema, response.body)
        except SchemaValidationError as e:
            raise ApiError(
                f"Invalid response for {route.name}: {e}",
                OUTPUT_VALIDATION_STATUS,
                response.body,
                kind=ApiErrorKind.validation,
            ) from e

    def _validate_input(self, route: Route, body: Any) -> Any:
        try:
            value = self._validator.validate(route.input_schema, body)
        except SchemaValidationError as e:
            raise ApiError(
                f"Invalid input for {route.name}: {e}",
                INPUT_VALIDATION_STATUS,
                kind=ApiErrorKind.validation,
            ) from e
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        return value

    async def list_avatars(self) -> list[Avatar]:
        """GET /v1/avatar"""
        return await self.call(LIST_AVATARS)

    async def list_sessions(self) -> list[Session]:
        """GET /v1/session"""
        return await self.call(LIST_SESSIONS)

    async def create_session(
        self, request: Union[CreateSessionRequest, Mapping[str, Any]]
    ) -> Session:
        """POST /v1/session"""
        if isinstance(request, Mapping) and not isinstance(request, dict):
            request = dict(request)
        return await self.call(CREATE_SESSION, body=request)

    async def get_session(self, session_id: str) -> Session:
        """GET /v1/session/{sessionId}"""
        return await self.call(GET_SESSION, params={"sessionId": session_id})
