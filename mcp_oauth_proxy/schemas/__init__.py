"""Public schema exports."""

from .auth import (
    AuthContext,
    AuthorizationRequestState,
    ClientRegistrationRequest,
    ClientRegistrationResponse,
    TokenResponse,
)

__all__ = [
    "AuthContext",
    "AuthorizationRequestState",
    "ClientRegistrationRequest",
    "ClientRegistrationResponse",
    "TokenResponse",
]
