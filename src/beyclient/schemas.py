"""Wire schemas for the Beyond Presence API and the registry that enforces them."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)

AVATAR = "avatar"
AVATAR_LIST = "avatar_list"
SESSION = "session"
SESSION_LIST = "session_list"
CREATE_SESSION_REQUEST = "create_session_request"


class _WireModel(BaseModel):
    # Unknown fields are kept so newer server payloads still validate.
    model_config = ConfigDict(extra="allow", frozen=True)


class Avatar(_WireModel):
    """Avatar returned by the API."""

    id: StrictStr = Field(description="Unique identifier for the avatar")
    name: StrictStr = Field(description="Name of the avatar")


class Session(_WireModel):
    """Session returned by the API."""

    id: StrictStr = Field(description="Unique identifier for the session")
    created_at: StrictStr = Field(description="Timestamp when the session was created")
    status: StrictStr = Field(description="Current status of the session")
    avatar_id: StrictStr = Field(description="ID of the avatar used in this session")
    livekit_url: StrictStr = Field(description="LiveKit URL for the WebRTC session")
    livekit_token: StrictStr = Field(description="LiveKit token for authentication", repr=False)

    @field_validator("created_at")
    @classmethod
    def _check_iso8601(cls, value: str) -> str:
        parse_timestamp(value)
        return value

    @property
    def created_at_datetime(self) -> datetime:
        """created_at parsed into an aware datetime."""
        return parse_timestamp(self.created_at)


class CreateSessionRequest(_WireModel):
    """Parameters for creating a session."""

    avatar_id: StrictStr = Field(description="ID of the avatar to use for this session")
    livekit_url: StrictStr = Field(description="LiveKit URL for the WebRTC room")
    livekit_token: StrictStr = Field(description="LiveKit token for room authentication", repr=False)


_TIMESTAMP_RE = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<tz>Z|(?P<sign>[+-])(?P<tz_hour>\d{2}):(?P<tz_minute>\d{2}))",
    re.ASCII,
)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 date-time such as ``2025-03-01T12:30:00.123Z``.

    A full date, ``T``, a time with seconds and a ``Z`` or ``+HH:MM`` offset
    are required. Fractions of any length are accepted and truncated to
    microseconds.
    """
    m = _TIMESTAMP_RE.fullmatch(value)
    if m is None:
        raise ValueError(f"invalid ISO-8601 timestamp: {value!r}")

    fraction = (m.group("fraction") or "")[:6].ljust(6, "0")
    try:
        tz = timezone.utc
        if m.group("sign"):
            offset = timedelta(hours=int(m.group("tz_hour")), minutes=int(m.group("tz_minute")))
            tz = timezone(-offset if m.group("sign") == "-" else offset)
        return datetime(
            int(m.group("year")),
            int(m.group("month")),
            int(m.group("day")),
            int(m.group("hour")),
            int(m.group("minute")),
            int(m.group("second")),
            int(fraction),
            tzinfo=tz,
        )
    except ValueError as e:
        raise ValueError(f"invalid ISO-8601 timestamp: {value!r}") from e


class SchemaValidationError(ValueError):
    """Raised when a value does not match the named schema."""

    def __init__(self, schema: str, errors: list[dict[str, Any]]):
        self.schema = schema
        self.errors = errors
        super().__init__(f"{schema}: {_summarize(errors)}")


def _summarize(errors: list[dict[str, Any]]) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts) or "invalid value"


class Validator(Protocol):
    """Anything able to check a value against a named schema."""

    def validate(self, schema: str, value: Any) -> Any:
        """Return the validated value or raise SchemaValidationError."""
        ...


class SchemaRegistry:
    """
    Maps schema names to pydantic adapters.

    validate() performs structural checks only: required string fields must be
    present with string values, extra fields are accepted.
    """

    def __init__(self, schemas: dict[str, Any] | None = None):
        if schemas is None:
            schemas = {
                AVATAR: Avatar,
                AVATAR_LIST: list[Avatar],
                SESSION: Session,
                SESSION_LIST: list[Session],
                CREATE_SESSION_REQUEST: CreateSessionRequest,
            }
        self._adapters: dict[str, TypeAdapter] = {
            name: TypeAdapter(tp) for name, tp in schemas.items()
        }

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._adapters)

    def validate(self, schema: str, value: Any) -> Any:
        adapter = self._adapters.get(schema)
        if adapter is None:
            raise KeyError(f"Unknown schema: {schema}")
        try:
            return adapter.validate_python(value)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_input=False)
            raise SchemaValidationError(schema, errors) from e


default_registry = SchemaRegistry()


def validate(schema: str, value: Any) -> Any:
    """Validate against the default registry."""
    return default_registry.validate(schema, value)
