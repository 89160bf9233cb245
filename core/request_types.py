"""Shared request data types."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    method: str
    target_url: str
    headers: list[tuple[str, str]]
    body: bytes

    @property
    def display_url(self) -> str:
        """Target URL without the query string, which may carry credentials."""
        return self.target_url.split("?", 1)[0]
