"""Tests for the upstream forwarder."""

import asyncio

import httpx

from core.request_types import PreparedRequest
from services.upstream import UpstreamClient
from tests.helpers import CapturingLogger, upstream_response


def forward(prepared: PreparedRequest) -> list[httpx.Request]:
    """Forward through a client configured like the app's and return what was sent."""
    sent = []

    def handler(request):
        sent.append(request)
        return upstream_response(200, json_body={"ok": True})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await UpstreamClient(client, CapturingLogger()).forward(prepared)

    asyncio.run(run())
    return sent


class TestUpstreamClient:
    """Tests for UpstreamClient.forward."""

    def test_only_prepared_headers_are_sent(self):
        prepared = PreparedRequest(
            method="GET",
            target_url="https://api.apify.com/v2/users/me",
            headers=[("host", "api.apify.com"), ("Authorization", "Bearer t")],
            body=b"",
        )

        sent = forward(prepared)

        assert sent[0].headers.multi_items() == [
            ("host", "api.apify.com"),
            ("authorization", "Bearer t"),
        ]

    def test_client_defaults_are_not_added(self):
        prepared = PreparedRequest(
            method="GET",
            target_url="https://api.apify.com/v2/acts",
            headers=[("host", "api.apify.com")],
            body=b"",
        )

        headers = forward(prepared)[0].headers

        assert "user-agent" not in headers
        assert "accept-encoding" not in headers
        assert "accept" not in headers

    def test_body_is_sent_with_its_length(self):
        prepared = PreparedRequest(
            method="POST",
            target_url="https://api.apify.com/v2/acts/a/runs",
            headers=[("host", "api.apify.com"), ("Content-Type", "application/json")],
            body=b'{"memory":1}',
        )

        request = forward(prepared)[0]

        assert request.content == b'{"memory":1}'
        assert request.headers["content-length"] == "12"
