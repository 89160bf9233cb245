"""FastAPI route handlers."""

import time
from datetime import UTC, datetime
from pathlib import Path

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.requests import ClientDisconnect

from core.config import Settings
from core.exceptions import InvalidTarget, RequestTooLarge
from core.protocols import RequestLogger
from core.router import Route
from ui.log_utils import write_request_log


async def read_body(request: Request, limit: int) -> bytes:
    """Read the request body, refusing anything over `limit` bytes."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise RequestTooLarge(limit)

    chunks: list[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            raise RequestTooLarge(limit)
        chunks.append(chunk)
    return b"".join(chunks)


def raw_request_path(request: Request) -> str:
    """Path as sent on the wire, before percent-decoding."""
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return request.url.path
    return raw_path.split(b"?", 1)[0].decode("latin-1")


async def handle_request(request: Request, config: Settings, logger: RequestLogger) -> Response:
    """Dispatch any inbound request to the health, proxy or not-found handler."""
    if request.method == "OPTIONS":
        return handle_preflight()

    routing_service = request.app.state.routing_service
    path = raw_request_path(request)
    decision = routing_service.decide(path)

    if decision.route is Route.HEALTH:
        return handle_health(request, config)
    if decision.route is Route.PROXY:
        return await handle_proxy(request, path, config, logger)

    logger.log_not_found(request.method, path)
    return handle_not_found(request)


def handle_health(request: Request, config: Settings) -> JSONResponse:
    """Report liveness, the upstream target and uptime."""
    return JSONResponse(
        {
            "status": "OK",
            "timestamp": datetime.now(UTC).isoformat(),
            "target": config.upstream_base_url,
            "uptime": time.monotonic() - request.app.state.started_at,
        }
    )


def handle_not_found(request: Request) -> JSONResponse:
    routing_service = request.app.state.routing_service
    routes = routing_service.available_routes
    return JSONResponse(
        status_code=404,
        content={
            "error": "Route not found",
            "available_routes": routes,
            "message": f"Use {routes[-1]} to proxy Apify API calls",
        },
    )


def handle_preflight() -> Response:
    """Answer OPTIONS locally; CORS headers are added by the middleware."""
    return Response(status_code=204)


async def handle_proxy(
    request: Request,
    path: str,
    config: Settings,
    logger: RequestLogger,
) -> Response:
    """Forward a mounted request to the upstream API."""
    try:
        body = await read_body(request, config.max_body_size)
    except RequestTooLarge as e:
        logger.log_error("inbound", 413, str(e))
        return JSONResponse(
            status_code=413,
            content={"error": "Request body too large", "limit": e.limit},
        )
    except ClientDisconnect:
        logger.log_error("inbound", 499, "Client closed the connection before the body was read")
        return Response(status_code=499)

    query_string = request.scope.get("query_string", b"").decode("latin-1")

    if config.log_requests:
        write_request_log(
            request.method,
            path,
            request.headers.items(),
            body,
            query=query_string,
            log_root=Path(config.log_dir),
        )

    routing_service = request.app.state.routing_service
    try:
        prepared = routing_service.prepare(
            request.method,
            path,
            query_string,
            request.query_params,
            request.headers.items(),
            body,
            content_type=request.headers.get("content-type"),
        )
    except InvalidTarget as e:
        logger.log_error("inbound", 400, str(e))
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid proxy path", "message": str(e)},
        )

    upstream = request.app.state.upstream_client
    return await upstream.forward(prepared)
