from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ApiErrorKind(str, Enum):
    """
    Failure categories surfaced through ApiError.

    Notes:
    - String enum so the kind serializes cleanly to logs/JSON.
    - Every failure reaching the caller is an ApiError; the kind tells the
      local validation failures apart from transport and HTTP failures.
    """

    validation = "validation"
    network = "network"
    timeout = "timeout"
    http = "http"


# Status codes used for failures that never produced an HTTP response.
INPUT_VALIDATION_STATUS = 400
OUTPUT_VALIDATION_STATUS = 502
TIMEOUT_STATUS = 408
NO_RESPONSE_STATUS = 0
UNKNOWN_FAILURE_STATUS = 500


class ApiError(Exception):
    """
    Normalized SDK error.

    Attributes:
        message: Human readable description.
        status_code: HTTP status of the response, or a local convention value
            when no response exists (see the module constants).
        response_body: Decoded response body, when one was received.
        kind: The failure category.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        response_body: Optional[Any] = None,
        kind: ApiErrorKind = ApiErrorKind.http,
    ):
        super().__init__(message, status_code, response_body, kind)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.kind = kind

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"ApiError(message={self.message!r}, status_code={self.status_code}, "
            f"kind={self.kind.value})"
        )
