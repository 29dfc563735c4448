from __future__ import annotations

import asyncio
import base64

import httpx

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.config import BasicAuth, RateLimit, ResilienceConfig, RetryPolicy


def test_default_retry_policy_skips_non_idempotent_methods() -> None:
    allowed = RetryPolicy().allowed_methods

    assert "GET" in allowed
    assert "DELETE" in allowed
    assert "POST" not in allowed
    assert "PATCH" not in allowed


def test_client_sends_basic_auth_and_headers() -> None:
    seen: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"value": []})

    config = ResilienceConfig(
        name="catalog",
        base_url="http://catalog.test/v1.1/",
        auth=BasicAuth("user", "secret"),
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        default_headers={"X-Client": "catalogsync"},
    )

    async def run() -> None:
        async with ResilientClient(config) as client:
            # keep the configured auth and headers, swap only the transport
            client._client._transport = httpx.MockTransport(handler)  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            await client.get("Things")

    asyncio.run(run())

    (request,) = seen
    expected = base64.b64encode(b"user:secret").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"
    assert request.headers["X-Client"] == "catalogsync"
    assert str(request.url) == "http://catalog.test/v1.1/Things"
