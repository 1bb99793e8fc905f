"""Token endpoint: redeem a proxy authorization code for a proxy access token."""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from mcp_oauth_proxy.core.errors import (
    InvalidClient,
    InvalidGrant,
    InvalidRequest,
    UnsupportedGrantType,
)
from mcp_oauth_proxy.core.logging import mask_secret
from mcp_oauth_proxy.models.oauth import AccessTokenRecord, AuthorizationCodeRecord
from mcp_oauth_proxy.schemas.auth import TokenResponse
from mcp_oauth_proxy.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

ACCESS_TOKEN_PREFIX = "mcp_at_"


def pkce_challenge_matches(verifier: str, challenge: str, method: Optional[str]) -> bool:
    """Check a PKCE verifier against its challenge (RFC 7636 section 4.6)."""
    method = method or "plain"
    if method == "S256":
        digest = hashlib.sha256(verifier.encode("utf-8")).digest()
        computed = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
    elif method == "plain":
        computed = verifier
    else:
        raise InvalidRequest(f"Unsupported code_challenge_method: {method}")
    return hmac.compare_digest(computed.encode("utf-8"), challenge.encode("utf-8"))


class TokenExchangeService:
    """Validate token requests and mint access tokens."""

    def __init__(
        self,
        store: CredentialStore,
        *,
        access_token_ttl_seconds: int = 3600,
        enforce_pkce: bool = True,
    ) -> None:
        self._store = store
        self._token_ttl_seconds = access_token_ttl_seconds
        self._enforce_pkce = enforce_pkce

    def exchange(
        self,
        *,
        grant_type: Optional[str],
        code: Optional[str],
        client_id: Optional[str],
        client_secret: Optional[str],
        redirect_uri: Optional[str] = None,
        code_verifier: Optional[str] = None,
    ) -> TokenResponse:
        if grant_type != "authorization_code":
            logger.info("Rejected token request with grant type %s", grant_type)
            raise UnsupportedGrantType()

        if not code or not client_id or not client_secret:
            raise InvalidRequest("Missing required parameters")

        if self._store.validate_client(client_id, client_secret) is None:
            raise InvalidClient("Invalid client credentials")

        record = self._store.get_auth_code(code)
        if record is None:
            logger.info("Authorization code %s not found", mask_secret(code))
            raise InvalidGrant("Invalid authorization code")

        if record.is_expired():
            self._store.delete_auth_code(code)
            raise InvalidGrant("Authorization code expired")

        if redirect_uri and record.redirect_uri != redirect_uri:
            raise InvalidGrant("Redirect URI mismatch")

        if record.client_id != client_id:
            raise InvalidGrant("Authorization code was issued to another client")

        self._check_pkce(record, code_verifier)

        # Whoever removes the code first owns it.
        if self._store.pop_auth_code(code) is None:
            raise InvalidGrant("Invalid authorization code")

        return self._issue_token(record, client_id)

    def _check_pkce(
        self, record: AuthorizationCodeRecord, code_verifier: Optional[str]
    ) -> None:
        if not record.code_challenge:
            return
        if not code_verifier:
            raise InvalidRequest("PKCE code_verifier required")
        if not self._enforce_pkce:
            logger.warning(
                "PKCE verification disabled; accepting verifier for client %s",
                record.client_id,
            )
            return
        if not pkce_challenge_matches(
            code_verifier, record.code_challenge, record.code_challenge_method
        ):
            raise InvalidGrant("PKCE verification failed")

    def _issue_token(self, record: AuthorizationCodeRecord, client_id: str) -> TokenResponse:
        token = f"{ACCESS_TOKEN_PREFIX}{secrets.token_urlsafe(32)}"
        self._store.put_access_token(
            token,
            AccessTokenRecord(
                token=token,
                client_id=client_id,
                user=record.user,
                scope=record.scope,
                expires_at=datetime.now(timezone.utc)
                + timedelta(seconds=self._token_ttl_seconds),
            ),
        )
        logger.info("Generated access token %s for client %s", mask_secret(token), client_id)
        return TokenResponse(
            access_token=token,
            token_type="Bearer",
            expires_in=self._token_ttl_seconds,
            scope=record.scope,
        )


__all__ = ["ACCESS_TOKEN_PREFIX", "TokenExchangeService", "pkce_challenge_matches"]
