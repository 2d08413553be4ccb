"""HTTP transport with default headers, timeout and bounded retries."""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Protocol

import aiohttp
from nanoid import generate

from .errors import (
    NO_RESPONSE_STATUS,
    TIMEOUT_STATUS,
    UNKNOWN_FAILURE_STATUS,
    ApiError,
    ApiErrorKind,
)

if TYPE_CHECKING:
    from .config import ClientConfig

USER_AGENT = "bey-client-python/0.1.0"
API_KEY_HEADER = "x-api-key"
REQUEST_ID_HEADER = "X-Request-Id"
REQUEST_ID_TIME_FORMAT = "%Y%m%d%H%M%S"
REQUEST_ID_NANOID_LENGTH = 12


def generate_request_id(now: Optional[datetime] = None) -> str:
    """
    Build the X-Request-Id value for one logical call: "YYYYMMDDHHMMSS_<nanoid>".

    The timestamp is UTC; the same ID is sent on every retry of the call.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return f"{now.strftime(REQUEST_ID_TIME_FORMAT)}_{generate(size=REQUEST_ID_NANOID_LENGTH)}"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff for transient failures.

    Attributes:
        attempts: Total attempts including the first one.
        base_delay_ms: Delay before the first retry.
        max_delay_ms: Upper bound for any single delay.
    """

    attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000

    def delay_ms(self, retry_number: int) -> int:
        """Delay before retry ``retry_number`` (1-based)."""
        return min(self.base_delay_ms * 2 ** (retry_number - 1), self.max_delay_ms)

    def should_retry(self, response: Optional["HttpResponse"]) -> bool:
        # No response means a network level failure.
        if response is None:
            return True
        return response.status >= 500


@dataclass(frozen=True)
class HttpResponse:
    """Status and decoded body of one HTTP exchange."""

    status: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpPrimitive(Protocol):
    """The request function Transport delegates to."""

    def __call__(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        json_body: Any,
        timeout_s: float,
    ) -> Awaitable[HttpResponse]: ...


def decode_body(text: str) -> Any:
    """Decode a response body as JSON, falling back to the raw text."""
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


class AiohttpPrimitive:
    """Default HttpPrimitive: one aiohttp ClientSession per request."""

    async def __call__(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        json_body: Any,
        timeout_s: float,
    ) -> HttpResponse:
        timeout = aiohttp.ClientTimeout(total=timeout_s)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(
                method, url, json=json_body, headers=dict(headers)
            ) as response:
                response_text = await response.text()
                return HttpResponse(
                    status=response.status,
                    body=decode_body(response_text),
                    headers=dict(response.headers),
                )


class Transport:
    """
    Issues HTTP requests against the configured base URL.

    Responses are returned whatever their status; only failures that produced
    no response at all are turned into ApiError here. Network failures and 5xx
    responses are retried per the config's RetryPolicy, 4xx never are.
    """

    def __init__(
        self,
        cfg: "ClientConfig",
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._cfg = cfg
        self._base_url = cfg.base_url.rstrip("/")
        self._timeout_s = cfg.timeout_ms / 1000
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            API_KEY_HEADER: cfg.api_key,
        }
        self._http: HttpPrimitive = cfg.http if cfg.http is not None else AiohttpPrimitive()
        self._sleep = sleep

    @property
    def config(self) -> "ClientConfig":
        return self._cfg

    @property
    def headers(self) -> dict[str, str]:
        """A copy of the default request headers."""
        return dict(self._headers)

    def url_for(self, path: str) -> str:
        return self._base_url + "/" + path.lstrip("/")

    async def request(
        self, method: str, path: str, *, json_body: Any = None
    ) -> HttpResponse:
        """
        Send one logical request, retrying transient failures.

        Returns:
            The final HttpResponse, which may carry a non-2xx status.

        Raises:
            ApiError: If no response was received on the final attempt.
        """
        policy = self._cfg.retry
        attempts = max(1, policy.attempts)
        url = self.url_for(path)
        request_id = generate_request_id()
        headers = dict(self._headers)
        headers[REQUEST_ID_HEADER] = request_id

        for attempt in range(1, attempts + 1):
            self._log(
                "debug",
                f"{method} {url}",
                {"attempt": attempt, "request_id": request_id},
            )
            started = time.monotonic()
            response: Optional[HttpResponse] = None
            failure: Optional[ApiError] = None
            cause: Optional[BaseException] = None

            try:
                response = await self._http(
                    method,
                    url,
                    headers=headers,
                    json_body=json_body,
                    timeout_s=self._timeout_s,
                )
            except ApiError:
                raise
            except asyncio.TimeoutError as e:
                failure = ApiError(
                    "Request timeout", TIMEOUT_STATUS, kind=ApiErrorKind.timeout
                )
                cause = e
            except (aiohttp.ClientError, OSError) as e:
                failure = ApiError(
                    f"Request failed: {e or type(e).__name__}",
                    NO_RESPONSE_STATUS,
                    kind=ApiErrorKind.network,
                )
                cause = e
            except Exception as e:
                failure = ApiError(
                    f"Request failed: {e or 'Unknown error'}",
                    UNKNOWN_FAILURE_STATUS,
                    kind=ApiErrorKind.network,
                )
                cause = e

            elapsed_ms = int((time.monotonic() - started) * 1000)
            last = attempt == attempts

            if response is not None:
                self._log(
                    "debug",
                    f"{method} {url} -> {response.status}",
                    {"elapsed_ms": elapsed_ms, "request_id": request_id},
                )
                if response.ok or last or not policy.should_retry(response):
                    if not response.ok:
                        self._log(
                            "error",
                            f"{method} {url} failed with status {response.status}",
                            {"attempts": attempt, "request_id": request_id},
                        )
                    return response
                reason = f"status {response.status}"
            else:
                assert failure is not None
                if last:
                    self._log(
                        "error",
                        f"{method} {url} failed: {failure.message}",
                        {"attempts": attempt, "request_id": request_id},
                    )
                    raise failure from cause
                reason = failure.message

            delay_ms = policy.delay_ms(attempt)
            self._log(
                "warn",
                f"Retrying {method} {url} after {reason}",
                {"attempt": attempt, "delay_ms": delay_ms, "request_id": request_id},
            )
            await self._sleep(delay_ms / 1000)

        raise AssertionError("unreachable")  # pragma: no cover

    def _log(self, level: str, message: str, data: Any = None) -> None:
        if self._cfg.logger is not None:
            self._cfg.logger.emit(level, message, data)
