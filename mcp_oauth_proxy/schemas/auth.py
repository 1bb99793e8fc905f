"""Schemas exchanged with OAuth clients and protected-resource callers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ClientRegistrationRequest(BaseModel):
    """RFC 7591 registration payload.

    Required fields are optional here so that omissions surface as OAuth
    ``invalid_request`` errors instead of framework validation errors.
    """

    client_name: Optional[str] = Field(None, description="Human readable client name.")
    redirect_uris: Optional[List[str]] = Field(
        None, description="Absolute redirect URIs the client may use."
    )
    grant_types: Optional[List[str]] = None
    response_types: Optional[List[str]] = None
    scopes: Optional[List[str]] = None


class ClientRegistrationResponse(BaseModel):
    """Credentials returned once, at registration time."""

    client_id: str
    client_secret: str
    client_id_issued_at: int
    client_secret_expires_at: int = Field(0, description="0 means never expires.")
    client_name: str
    redirect_uris: List[str]
    grant_types: List[str]
    response_types: List[str]
    scopes: str = Field(..., description="Space-delimited default scopes.")


class TokenResponse(BaseModel):
    """Successful token endpoint response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    scope: Optional[str] = None


class AuthorizationRequestState(BaseModel):
    """Authorization request parameters carried through the upstream redirect."""

    v: int = Field(1, description="Schema version of the encoded state.")
    client_id: str
    redirect_uri: str
    response_type: str = "code"
    state: Optional[str] = Field(None, description="Opaque state sent by the client.")
    scope: Optional[str] = None
    code_challenge: Optional[str] = None
    code_challenge_method: Optional[str] = None
    resource: Optional[str] = None
    issued_at: datetime


class AuthContext(BaseModel):
    """Outcome of validating a proxy access token."""

    token: str
    client_id: str
    scopes: List[str]
    user: Dict[str, Any] = Field(default_factory=dict)
    expires_at: datetime


__all__ = [
    "AuthContext",
    "AuthorizationRequestState",
    "ClientRegistrationRequest",
    "ClientRegistrationResponse",
    "TokenResponse",
]
