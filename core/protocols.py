"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (console lines or Dashboard)."""

    def log_request(self, method: str, path: str) -> None: ...
    def log_token(self, preview: str) -> None: ...
    def log_response(self, method: str, path: str, status: int) -> None: ...
    def log_not_found(self, method: str, path: str) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
