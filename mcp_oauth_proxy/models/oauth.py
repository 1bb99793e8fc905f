"""
Domain models for OAuth records held by the credential store.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegisteredClient(BaseModel):
    """A dynamically registered MCP client."""

    client_id: str
    client_secret: str
    client_name: str
    redirect_uris: List[str]
    grant_types: List[str] = Field(default_factory=lambda: ["authorization_code"])
    response_types: List[str] = Field(default_factory=lambda: ["code"])
    scopes: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


class AuthorizationCodeRecord(BaseModel):
    """A proxy-issued authorization code waiting to be redeemed."""

    code: str
    client_id: str
    upstream_access_token_encrypted: str = Field(
        ..., description="GitHub access token, encrypted with the token cipher."
    )
    user: Dict[str, Any] = Field(
        default_factory=dict, description="Identity payload returned by GitHub."
    )
    scope: Optional[str] = None
    code_challenge: Optional[str] = None
    code_challenge_method: Optional[str] = None
    redirect_uri: str
    resource: Optional[str] = None
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or _utcnow()) > self.expires_at


class AccessTokenRecord(BaseModel):
    """A proxy-issued bearer token."""

    token: str
    client_id: str
    user: Dict[str, Any] = Field(default_factory=dict)
    scope: Optional[str] = None
    expires_at: datetime
    created_at: datetime = Field(default_factory=_utcnow)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or _utcnow()) > self.expires_at


__all__ = ["AccessTokenRecord", "AuthorizationCodeRecord", "RegisteredClient"]
