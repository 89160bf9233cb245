"""HTTP proxying utilities for upstream requests."""

from datetime import UTC, datetime

import httpx
from fastapi import Response
from fastapi.responses import JSONResponse

from core.exceptions import UpstreamConnectionError, UpstreamError, UpstreamTimeoutError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest

PROXY_ERROR = "Proxy Error"


def proxy_error_response(message: str) -> JSONResponse:
    """Synthesized response for a request the upstream never answered."""
    return JSONResponse(
        status_code=500,
        content={
            "error": PROXY_ERROR,
            "message": message,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


class UpstreamClient:
    """Forward prepared requests to the upstream API and relay its responses."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        logger: RequestLogger,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._client = client
        self._logger = logger
        self._headers = header_builder or HeaderBuilder()

    async def forward(self, prepared: PreparedRequest) -> Response:
        """Send the request once and relay status, headers and raw body."""
        try:
            upstream = await self._send(prepared)
        except UpstreamError as e:
            self._logger.log_error("upstream", 500, e.message)
            return proxy_error_response(e.message)

        status, headers, body = upstream
        self._logger.log_response(prepared.method, prepared.display_url, status)

        head = prepared.method == "HEAD"
        response = Response(content=body, status_code=status)
        for key, value in self._headers.build_client_headers(headers, keep_content_length=head):
            if key.lower() == "content-length":
                # HEAD has no body; report the length the upstream would send
                response.headers[key] = value
            else:
                response.headers.append(key, value)
        return response

    async def _send(
        self,
        prepared: PreparedRequest,
    ) -> tuple[int, list[tuple[str, str]], bytes]:
        """Execute the request, translating transport failures to UpstreamError."""
        # Built directly so the client adds no default headers of its own
        request = httpx.Request(
            prepared.method,
            prepared.target_url,
            headers=prepared.headers,
            content=prepared.body or None,
        )
        try:
            response = await self._client.send(request, stream=True)
            try:
                # Raw bytes, so Content-Encoding still describes the body
                body = b"".join([chunk async for chunk in response.aiter_raw()])
            finally:
                await response.aclose()
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(_describe(e), prepared.target_url) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(_describe(e), prepared.target_url) from e

        return response.status_code, response.headers.multi_items(), body


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__
