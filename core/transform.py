"""Path rewriting for upstream requests."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProxyRule:
    """A mount prefix and what replaces it on the way upstream."""

    prefix: str
    replacement: str = ""


class PathRewriter:
    """Rewrite inbound paths for the upstream API."""

    def __init__(self, rule: ProxyRule):
        self.rule = rule

    def rewrite(self, path: str, query: str = "") -> str:
        """Strip the leading mount prefix and reattach the raw query string.

        Only an occurrence at the very start of the path is replaced. An empty
        remainder becomes "/" since upstream request targets cannot be empty.
        """
        if path.startswith(self.rule.prefix):
            path = self.rule.replacement + path[len(self.rule.prefix):]
        if not path:
            path = "/"
        if query:
            return f"{path}?{query}"
        return path
