"""
Example: HTTP Service

This example exposes a small HTTP API in front of the Beyond Presence SDK:
- GET /healthz
- GET /connect returns the avatars and sessions visible to the API key
- POST /connect creates a session from {"avatar_id", "livekit_url", "livekit_token"}
  and returns it

Notes:
- The LiveKit join token is issued by your own LiveKit token service (short
  lived, typically 15 minutes) and passed through as an opaque string.
- SDK failures are mapped to JSON errors carrying the upstream status code.
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Optional

from aiohttp import web

from beyclient import ApiError, BeyondSDK, ClientConfig, LoggerSink, config_from_env

_SDK_KEY = web.AppKey("sdk", BeyondSDK)


def _error_response(e: ApiError) -> web.Response:
    # Status 0 means no response was received from the API.
    status = e.status_code if 400 <= e.status_code < 600 else 502
    return web.json_response(
        {"error": e.kind.value, "message": e.message, "status_code": e.status_code},
        status=status,
    )


async def handle_health(_request: web.Request) -> web.Response:
    return web.json_response({"ok": True})


async def handle_list(request: web.Request) -> web.Response:
    sdk = request.app[_SDK_KEY]
    try:
        avatars = await sdk.avatars.list()
        sessions = await sdk.sessions.list()
    except ApiError as e:
        return _error_response(e)
    return web.json_response(
        {
            "avatars": [a.model_dump() for a in avatars],
            "sessions": [s.model_dump(exclude={"livekit_token"}) for s in sessions],
        }
    )


async def handle_connect(request: web.Request) -> web.Response:
    sdk = request.app[_SDK_KEY]
    try:
        body: dict[str, Any] = await request.json()
    except json.JSONDecodeError:
        return web.json_response({"error": "invalid_json"}, status=400)

    try:
        session = await sdk.sessions.create(body)
    except ApiError as e:
        return _error_response(e)
    return web.json_response(session.model_dump(exclude={"livekit_token"}), status=201)


def create_app(config: Optional[ClientConfig] = None) -> web.Application:
    if config is None:
        config = config_from_env(
            logger=LoggerSink.from_logging(logging.getLogger("beyclient"))
        )

    app = web.Application()
    app[_SDK_KEY] = BeyondSDK.from_config(config)
    app.add_routes(
        [
            web.get("/healthz", handle_health),
            web.get("/connect", handle_list),
            web.post("/connect", handle_connect),
        ]
    )
    return app


def main() -> None:
    parser = argparse.ArgumentParser(description="HTTP service example for bey-client")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    web.run_app(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
