"""Custom exception hierarchy for the Apify proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class UpstreamError(ProxyError):
    """Raised when the upstream API cannot be reached.

    Attributes:
        message: Error message
        target_url: URL the request was sent to (optional)
    """

    def __init__(self, message: str, target_url: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.target_url = target_url


class UpstreamTimeoutError(UpstreamError):
    """Raised when the upstream request times out."""


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to the upstream API."""


class RequestTooLarge(ProxyError):
    """Request body exceeds size limit.

    Attributes:
        limit: Configured maximum body size in bytes
    """

    def __init__(self, limit: int) -> None:
        super().__init__(f"Request body exceeds {limit} bytes")
        self.limit = limit


class InvalidTarget(ProxyError):
    """Rewritten path would leave the configured upstream origin."""
