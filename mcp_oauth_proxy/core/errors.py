"""
OAuth error vocabulary shared by every endpoint of the proxy.

Each exception maps onto an RFC 6749 error code and an HTTP status; the
application-level exception handler renders them as ``{error,
error_description}`` JSON bodies.
"""

from __future__ import annotations

from http import HTTPStatus


class OAuthError(Exception):
    """Base class for errors surfaced to OAuth clients."""

    error = "server_error"
    status_code = HTTPStatus.BAD_REQUEST
    default_description = "OAuth request failed."

    def __init__(self, description: str | None = None) -> None:
        self.description = description or self.default_description
        super().__init__(self.description)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "error_description": self.description}


class InvalidRequest(OAuthError):
    error = "invalid_request"
    default_description = "Missing required parameters"


class InvalidClient(OAuthError):
    error = "invalid_client"
    default_description = "Invalid client"


class InvalidGrant(OAuthError):
    error = "invalid_grant"
    default_description = "Invalid authorization code"


class UnsupportedGrantType(OAuthError):
    error = "unsupported_grant_type"
    default_description = "Only authorization_code grant type is supported"


class AccessDenied(OAuthError):
    error = "access_denied"
    default_description = "The upstream provider denied the request"


class InvalidToken(OAuthError):
    error = "invalid_token"
    status_code = HTTPStatus.UNAUTHORIZED
    default_description = "Invalid or expired access token"


class ServerError(OAuthError):
    error = "server_error"
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    default_description = "Internal server error"


__all__ = [
    "AccessDenied",
    "InvalidClient",
    "InvalidGrant",
    "InvalidRequest",
    "InvalidToken",
    "OAuthError",
    "ServerError",
    "UnsupportedGrantType",
]
