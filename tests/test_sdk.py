import asyncio
import unittest

from beyclient import (
    ApiError,
    AvatarsResource,
    BeyondSDK,
    ClientConfig,
    HttpResponse,
    SessionsResource,
    create_beyond_sdk,
)

SESSION_JSON = {
    "id": "s1",
    "created_at": "2025-03-01T12:30:00+00:00",
    "status": "active",
    "avatar_id": "a1",
    "livekit_url": "wss://example.livekit.cloud",
    "livekit_token": "lk-token",
}


class _FakeHttp:
    """Answers by route; records every call."""

    def __init__(self, delay: float = 0.0):
        self.calls: list[dict] = []
        self._delay = delay

    async def __call__(self, method, url, *, headers, json_body, timeout_s):
        self.calls.append({"method": method, "url": url, "headers": dict(headers), "json": json_body})
        if self._delay:
            await asyncio.sleep(self._delay)
        if url.endswith("/v1/avatar"):
            return HttpResponse(200, [{"id": "a1", "name": "Ava"}])
        if method == "POST":
            return HttpResponse(200, dict(SESSION_JSON, id="s-" + json_body["avatar_id"]))
        if url.endswith("/v1/session"):
            return HttpResponse(200, [SESSION_JSON])
        return HttpResponse(200, dict(SESSION_JSON, id=url.rsplit("/", 1)[-1]))


class TestCreateBeyondSDK(unittest.TestCase):
    def test_builds_namespaces(self):
        sdk = create_beyond_sdk(api_key="k", base_url="https://api.test", timeout_ms=1000)
        self.assertIsInstance(sdk, BeyondSDK)
        self.assertIsInstance(sdk.avatars, AvatarsResource)
        self.assertIsInstance(sdk.sessions, SessionsResource)
        self.assertEqual(sdk.config.timeout_ms, 1000)

    def test_requires_api_key(self):
        with self.assertRaises(ValueError):
            create_beyond_sdk(base_url="https://api.test")

    def test_rejects_unknown_options(self):
        with self.assertRaises(TypeError):
            create_beyond_sdk(api_key="k", timeout=3000)


class TestBeyondSDK(unittest.IsolatedAsyncioTestCase):
    async def test_resources_delegate(self):
        http = _FakeHttp()
        sdk = create_beyond_sdk(api_key="k", base_url="https://api.test", http=http)

        avatars = await sdk.avatars.list()
        created = await sdk.sessions.create(
            {"avatar_id": avatars[0].id, "livekit_url": "wss://x", "livekit_token": "t"}
        )
        fetched = await sdk.sessions.get(created.id)
        listed = await sdk.sessions.list()

        self.assertEqual(avatars[0].name, "Ava")
        self.assertEqual(created.id, "s-a1")
        self.assertEqual(fetched.id, "s-a1")
        self.assertEqual([s.id for s in listed], ["s1"])
        self.assertEqual(
            [(c["method"], c["url"]) for c in http.calls],
            [
                ("GET", "https://api.test/v1/avatar"),
                ("POST", "https://api.test/v1/session"),
                ("GET", "https://api.test/v1/session/s-a1"),
                ("GET", "https://api.test/v1/session"),
            ],
        )

    async def test_set_api_key(self):
        http = _FakeHttp()
        sdk = create_beyond_sdk(api_key="old", base_url="https://api.test", http=http)
        rotated = sdk.set_api_key("new")

        self.assertIsInstance(rotated, BeyondSDK)
        await sdk.avatars.list()
        await rotated.avatars.list()
        await sdk.sessions.list()

        keys = [c["headers"]["x-api-key"] for c in http.calls]
        self.assertEqual(keys, ["old", "new", "old"])
        self.assertEqual(rotated.config.base_url, "https://api.test")

    async def test_concurrent_calls_are_independent(self):
        http = _FakeHttp(delay=0.01)
        sdk = create_beyond_sdk(api_key="k", base_url="https://api.test", http=http)
        results = await asyncio.gather(
            *(
                sdk.sessions.create({"avatar_id": f"a{i}", "livekit_url": "wss://x", "livekit_token": "t"})
                for i in range(5)
            )
        )
        self.assertEqual([s.id for s in results], [f"s-a{i}" for i in range(5)])
        self.assertEqual(len({c["headers"]["X-Request-Id"] for c in http.calls}), 5)

    async def test_retry_count_via_from_config(self):
        attempts = []

        async def always_503(method, url, *, headers, json_body, timeout_s):
            attempts.append(url)
            return HttpResponse(503)

        async def no_sleep(_seconds):
            return None

        sdk = BeyondSDK.from_config(ClientConfig(api_key="k", http=always_503), sleep=no_sleep)
        with self.assertRaises(ApiError) as ctx:
            await sdk.avatars.list()
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.message, "API request failed with status 503")
        self.assertEqual(len(attempts), 3)


if __name__ == "__main__":
    unittest.main()
