"""
Example: List Resources

This example demonstrates how to:
1. Configure the SDK from environment variables
2. List avatars and sessions
3. Optionally create a session and fetch it back
4. Rotate the API key

Environment:
- BEY_API_KEY (required), BEY_BASE_URL, BEY_TIMEOUT_MS
- LIVEKIT_URL and LIVEKIT_TOKEN: when both are set, a session is created with
  the first avatar. The token comes from your LiveKit token service.
"""

import asyncio
import logging
import os

from beyclient import ApiError, BeyondSDK, LoggerSink, config_from_env


async def list_avatars(sdk: BeyondSDK):
    try:
        avatars = await sdk.avatars.list()
    except ApiError as e:
        print(f"API Error ({e.status_code}): {e.message}")
        raise
    print(f"Available avatars: {[a.model_dump() for a in avatars]}")
    return avatars


async def create_session(sdk: BeyondSDK, avatar_id: str, livekit_url: str, livekit_token: str):
    try:
        session = await sdk.sessions.create(
            {
                "avatar_id": avatar_id,
                "livekit_url": livekit_url,
                "livekit_token": livekit_token,
            }
        )
    except ApiError as e:
        print(f"API Error ({e.status_code}): {e.message}")
        raise
    print(f"Created session: {session.id} ({session.status})")
    return session


async def main():
    logging.basicConfig(level=logging.DEBUG if os.getenv("DEBUG") else logging.INFO)
    config = config_from_env(logger=LoggerSink.from_logging(logging.getLogger("beyclient")))
    sdk = BeyondSDK.from_config(config)

    avatars = await list_avatars(sdk)

    livekit_url = os.getenv("LIVEKIT_URL", "").strip()
    livekit_token = os.getenv("LIVEKIT_TOKEN", "").strip()
    if avatars and livekit_url and livekit_token:
        session = await create_session(sdk, avatars[0].id, livekit_url, livekit_token)
        details = await sdk.sessions.get(session.id)
        print(f"Session details: id={details.id} created_at={details.created_at}")

    sessions = await sdk.sessions.list()
    print(f"All sessions: {[s.id for s in sessions]}")

    # Creates a new SDK instance; `sdk` keeps using the old key.
    new_key = os.getenv("BEY_NEW_API_KEY", "").strip()
    if new_key:
        rotated = sdk.set_api_key(new_key)
        print(f"API key updated, {len(await rotated.avatars.list())} avatars visible")


if __name__ == "__main__":
    asyncio.run(main())
