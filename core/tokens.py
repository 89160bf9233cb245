"""Locate caller-supplied API tokens for diagnostic logging."""

import json
from collections.abc import Mapping
from json import JSONDecodeError
from urllib.parse import parse_qs

TOKEN_FIELD = "token"
TOKEN_PREVIEW_LENGTH = 10


def extract_token(
    query_params: Mapping[str, str],
    body: bytes,
    content_type: str | None,
) -> str | None:
    """Find a token in the query string, falling back to the parsed body."""
    token = query_params.get(TOKEN_FIELD)
    if token:
        return token
    if not body:
        return None

    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            data = json.loads(body)
        except (JSONDecodeError, UnicodeDecodeError):
            return None
        if isinstance(data, dict):
            value = data.get(TOKEN_FIELD)
            return value if isinstance(value, str) and value else None
        return None

    if media_type == "application/x-www-form-urlencoded":
        values = parse_qs(body.decode("utf-8", errors="replace")).get(TOKEN_FIELD)
        return values[0] if values else None

    return None


def token_preview(token: str) -> str:
    """First characters of a token, never the full credential.

    Tokens no longer than the preview length are returned unchanged.
    """
    if len(token) <= TOKEN_PREVIEW_LENGTH:
        return token
    return token[:TOKEN_PREVIEW_LENGTH] + "..."
