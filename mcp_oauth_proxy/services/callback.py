"""
GitHub callback: finish the upstream exchange and mint a proxy authorization code.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from mcp_oauth_proxy.clients.github_auth import (
    AuthorizationStateCodec,
    GitHubOAuthClient,
    InvalidStateError,
)
from mcp_oauth_proxy.core.errors import AccessDenied, InvalidRequest, ServerError
from mcp_oauth_proxy.core.logging import mask_secret
from mcp_oauth_proxy.models.oauth import AuthorizationCodeRecord
from mcp_oauth_proxy.schemas.auth import AuthorizationRequestState
from mcp_oauth_proxy.services.credential_store import CredentialStore
from mcp_oauth_proxy.services.token_cipher import TokenCipherService
from mcp_oauth_proxy.utils.http import append_query_params

logger = logging.getLogger(__name__)

AUTH_CODE_PREFIX = "mcp_"


class CallbackFailure(Exception):
    """A callback step failed after the client's redirect target was recovered."""


class ProviderCallbackHandler:
    """Complete the GitHub leg of the flow and hand a code back to the client."""

    def __init__(
        self,
        store: CredentialStore,
        github_client: GitHubOAuthClient,
        state_codec: AuthorizationStateCodec,
        token_cipher: TokenCipherService,
        *,
        auth_code_ttl_seconds: int = 600,
        state_ttl_seconds: int = 900,
    ) -> None:
        self._store = store
        self._github = github_client
        self._codec = state_codec
        self._cipher = token_cipher
        self._code_ttl = timedelta(seconds=auth_code_ttl_seconds)
        self._state_ttl = timedelta(seconds=state_ttl_seconds)

    async def handle(
        self,
        *,
        code: Optional[str],
        state: Optional[str],
        callback_url: str,
        error: Optional[str] = None,
        error_description: Optional[str] = None,
    ) -> str:
        """Return the URL the user-agent should be redirected to.

        Raises an :class:`OAuthError` when no trustworthy client redirect
        target exists.
        """
        if error:
            logger.error("GitHub OAuth error: %s %s", error, error_description or "")
            raise AccessDenied(error_description or error)

        if not code or not state:
            raise InvalidRequest("Missing code or state parameter")

        try:
            request_state = self._codec.decode(state)
        except InvalidStateError as exc:
            logger.warning("Rejected OAuth callback state: %s", exc)
            raise ServerError(str(exc)) from exc

        try:
            authorization_code = await self._issue_code(code, request_state, callback_url)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error(
                "OAuth callback failed for client %s: %s", request_state.client_id, exc
            )
            return append_query_params(
                request_state.redirect_uri,
                error="server_error",
                error_description=str(exc) or "Unknown error",
                state=request_state.state,
            )

        logger.info(
            "Generated authorization code %s for client %s",
            mask_secret(authorization_code),
            request_state.client_id,
        )
        return append_query_params(
            request_state.redirect_uri,
            code=authorization_code,
            state=request_state.state,
        )

    async def _issue_code(
        self, upstream_code: str, request_state: AuthorizationRequestState, callback_url: str
    ) -> str:
        now = datetime.now(timezone.utc)
        issued_at = request_state.issued_at
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        if now - issued_at > self._state_ttl:
            raise CallbackFailure("Authorization request has expired")

        if self._store.validate_client(request_state.client_id) is None:
            raise CallbackFailure("Invalid client")

        upstream_token = await self._github.exchange_authorization_code(
            upstream_code, redirect_uri=callback_url
        )
        user = await self._github.fetch_user(upstream_token)

        authorization_code = f"{AUTH_CODE_PREFIX}{secrets.token_urlsafe(32)}"
        record = AuthorizationCodeRecord(
            code=authorization_code,
            client_id=request_state.client_id,
            upstream_access_token_encrypted=self._cipher.encrypt(upstream_token),
            user=user,
            scope=request_state.scope,
            code_challenge=request_state.code_challenge,
            code_challenge_method=request_state.code_challenge_method,
            redirect_uri=request_state.redirect_uri,
            resource=request_state.resource,
            expires_at=datetime.now(timezone.utc) + self._code_ttl,
        )
        self._store.put_auth_code(authorization_code, record)
        return authorization_code


__all__ = ["AUTH_CODE_PREFIX", "CallbackFailure", "ProviderCallbackHandler"]
