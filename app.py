"""FastAPI application factory."""

import asyncio
import time
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.handlers import handle_request
from core.config import Settings
from core.protocols import RequestLogger
from services.routing_service import RoutingService
from services.upstream import UpstreamClient

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]

FatalHandler = Callable[[BaseException], None]


def create_app(
    config: Settings,
    logger: RequestLogger,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    on_fatal: FatalHandler | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    def fail(error: BaseException) -> None:
        logger.log_error("internal", 500, f"{type(error).__name__}: {error}")
        if on_fatal is not None:
            on_fatal(error)

    def loop_exception_handler(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        error = context.get("exception") or RuntimeError(context.get("message", "unknown"))
        fail(error)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client_options: dict[str, Any] = {"follow_redirects": False}
        if config.upstream_timeout is not None:
            client_options["timeout"] = config.upstream_timeout
        limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
        client = httpx.AsyncClient(transport=transport, limits=limits, **client_options)

        app.state.started_at = time.monotonic()
        app.state.upstream_client = UpstreamClient(client, logger)
        app.state.routing_service = RoutingService(config=config, logger=logger)
        asyncio.get_running_loop().set_exception_handler(loop_exception_handler)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title="Apify Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    def internal_error(exc: Exception) -> JSONResponse:
        fail(exc)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        return internal_error(exc)

    @app.api_route("/{path:path}", methods=PROXY_METHODS)
    async def dispatch(request: Request):
        # Handled here, inside CORSMiddleware, so the 500 still carries CORS headers
        try:
            return await handle_request(request, config, logger)
        except Exception as exc:
            return internal_error(exc)

    return app
