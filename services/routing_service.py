"""Routing orchestration for proxy requests."""

from collections.abc import Iterable, Mapping

import httpx

from core.config import Settings
from core.exceptions import InvalidTarget
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest
from core.router import RouteDecider, RouteDecision
from core.tokens import extract_token, token_preview
from core.transform import PathRewriter, ProxyRule


class RoutingService:
    """Classify inbound requests and prepare the proxied ones for upstream."""

    def __init__(
        self,
        config: Settings,
        logger: RequestLogger,
        decider: RouteDecider | None = None,
        rewriter: PathRewriter | None = None,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._base_url = config.upstream_base_url
        upstream = httpx.URL(config.upstream_base_url)
        self._upstream_origin = (upstream.scheme, upstream.netloc)
        self._upstream_host = upstream.netloc.decode("ascii")
        self._logger = logger
        self._decider = decider or RouteDecider(config.health_path, config.mount_path)
        self._rewriter = rewriter or PathRewriter(ProxyRule(prefix=config.mount_path))
        self._headers = header_builder or HeaderBuilder()

    @property
    def available_routes(self) -> list[str]:
        return self._decider.available_routes

    def decide(self, path: str) -> RouteDecision:
        return self._decider.decide(path)

    def prepare(
        self,
        method: str,
        path: str,
        query_string: str,
        query_params: Mapping[str, str],
        headers: Iterable[tuple[str, str]],
        body: bytes,
        content_type: str | None = None,
    ) -> PreparedRequest:
        """Prepare a proxied request: rewrite the path, retarget Host, log the token."""
        rewritten = self._rewriter.rewrite(path, query_string)
        prepared = PreparedRequest(
            method=method,
            target_url=self._base_url + rewritten,
            headers=self._headers.build_upstream_headers(headers, self._upstream_host),
            body=body,
        )
        self._check_origin(prepared.target_url)
        self._logger.log_request(method, prepared.display_url)

        token = extract_token(query_params, body, content_type)
        if token:
            self._logger.log_token(token_preview(token))

        return prepared

    def _check_origin(self, target_url: str) -> None:
        """Reject suffixes that re-parse into a different scheme or authority."""
        try:
            target = httpx.URL(target_url)
        except httpx.InvalidURL as e:
            raise InvalidTarget(f"Cannot build upstream URL: {e}") from e
        if (target.scheme, target.netloc) != self._upstream_origin:
            raise InvalidTarget("Path does not resolve to the upstream origin")
