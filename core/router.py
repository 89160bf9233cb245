"""Request routing logic - determines health, proxy or not-found."""

from dataclasses import dataclass
from enum import Enum


class Route(str, Enum):
    HEALTH = "health"
    PROXY = "proxy"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RouteDecision:
    """Routing decision for a request."""

    route: Route
    path: str


class RouteDecider:
    """Classify inbound paths against the health path and the proxy mount."""

    def __init__(self, health_path: str = "/health", mount_path: str = "/api/apify"):
        self.health_path = health_path
        self.mount_path = mount_path

    def decide(self, path: str) -> RouteDecision:
        """Return the route for a path, checked in priority order."""
        if path == self.health_path:
            return RouteDecision(route=Route.HEALTH, path=path)
        if path.startswith(self.mount_path):
            return RouteDecision(route=Route.PROXY, path=path)
        return RouteDecision(route=Route.NOT_FOUND, path=path)

    @property
    def available_routes(self) -> list[str]:
        """Route patterns advertised to callers that miss."""
        return [self.health_path, f"{self.mount_path}/*"]
