"""Shared test doubles."""

import json

import httpx

ALLOWED_ORIGIN = "http://localhost:3000"


class CapturingLogger:
    """RequestLogger that records every call."""

    def __init__(self):
        self.events: list[tuple] = []

    def log_request(self, method, path):
        self.events.append(("request", method, path))

    def log_token(self, preview):
        self.events.append(("token", preview))

    def log_response(self, method, path, status):
        self.events.append(("response", method, path, status))

    def log_not_found(self, method, path):
        self.events.append(("not_found", method, path))

    def log_error(self, route, status, message):
        self.events.append(("error", route, status, message))

    def of(self, kind: str) -> list[tuple]:
        return [event for event in self.events if event[0] == kind]


def upstream_response(
    status: int = 200,
    *,
    json_body=None,
    content: bytes = b"",
    headers: list[tuple[str, str]] | None = None,
) -> httpx.Response:
    """Build an upstream response whose body is still an unread stream."""
    headers = list(headers or [])
    if json_body is not None:
        content = json.dumps(json_body, separators=(",", ":")).encode()
        headers.append(("content-type", "application/json"))
    return httpx.Response(status, headers=headers, stream=httpx.ByteStream(content))
