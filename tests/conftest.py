"""Pytest configuration and fixtures."""

from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Settings
from tests.helpers import CapturingLogger, upstream_response

ENV_VARS = [
    "HOST",
    "PORT",
    "UPSTREAM_BASE_URL",
    "APIFY_API_BASE_URL",
    "UPSTREAM_TIMEOUT",
    "MOUNT_PATH",
    "HEALTH_PATH",
    "ALLOWED_ORIGINS",
    "MAX_BODY_SIZE",
    "LOG_LEVEL",
    "LOG_DIR",
    "LOG_REQUESTS",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep host environment and .env files out of settings."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path):
    return Settings(log_dir=str(tmp_path / "logs"))


@pytest.fixture
def logger():
    return CapturingLogger()


@pytest.fixture
def upstream_calls():
    """Requests received by the mock upstream."""
    return []


@pytest.fixture
def make_client(settings, logger, upstream_calls):
    """Factory for a TestClient whose upstream is served by `handler`."""
    clients = []

    def factory(
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
        *,
        config: Settings | None = None,
        on_fatal=None,
        raise_server_exceptions: bool = True,
    ) -> TestClient:
        def record(request: httpx.Request) -> httpx.Response:
            upstream_calls.append(request)
            if handler is None:
                return upstream_response(200, json_body={"ok": True})
            return handler(request)

        app = create_app(
            config or settings,
            logger,
            transport=httpx.MockTransport(record),
            on_fatal=on_fatal,
        )
        client = TestClient(app, raise_server_exceptions=raise_server_exceptions)
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)
