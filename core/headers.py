"""Header construction for upstream requests and relayed responses."""

from collections.abc import Iterable

# Connection-scoped headers, re-framed by each hop
HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "content-length",
    }
)


class HeaderBuilder:
    """Build upstream request headers and relayed response headers."""

    def build_upstream_headers(
        self,
        headers: Iterable[tuple[str, str]],
        upstream_host: str,
    ) -> list[tuple[str, str]]:
        """Pass everything through except Host, which targets the upstream."""
        upstream: list[tuple[str, str]] = [("host", upstream_host)]
        for key, value in headers:
            key_lower = key.lower()
            if key_lower == "host" or key_lower in HOP_BY_HOP:
                continue
            upstream.append((key, value))
        return upstream

    def build_client_headers(
        self,
        headers: Iterable[tuple[str, str]],
        keep_content_length: bool = False,
    ) -> list[tuple[str, str]]:
        """Relay upstream response headers, keeping duplicates in order.

        Content-Length is dropped unless `keep_content_length` is set, as it is
        for HEAD responses whose empty body cannot be re-measured.
        """
        relayed = []
        for key, value in headers:
            key_lower = key.lower()
            if key_lower == "content-length" and keep_content_length:
                relayed.append((key, value))
            elif key_lower not in HOP_BY_HOP:
                relayed.append((key, value))
        return relayed
