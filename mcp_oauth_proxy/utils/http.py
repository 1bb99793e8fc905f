"""HTTP helpers shared by the OAuth endpoints."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import Request


def append_query_params(url: str, **params: str | None) -> str:
    """Add query parameters to ``url``, keeping any it already carries.

    Parameters whose value is ``None`` are skipped.
    """
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend((key, value) for key, value in params.items() if value is not None)
    return urlunsplit(parts._replace(query=urlencode(query)))


def public_base_url(request: Request, configured: object | None = None) -> str:
    """Origin the proxy is reachable at, without a trailing slash."""
    if configured:
        return str(configured).rstrip("/")
    return str(request.base_url).rstrip("/")


__all__ = ["append_query_params", "public_base_url"]
