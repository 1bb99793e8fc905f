"""Authorization endpoint: validate the client and bounce the user to GitHub."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from mcp_oauth_proxy.clients.github_auth import AuthorizationStateCodec, GitHubOAuthClient
from mcp_oauth_proxy.core.errors import InvalidClient, InvalidRequest
from mcp_oauth_proxy.schemas.auth import AuthorizationRequestState
from mcp_oauth_proxy.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class AuthorizationRedirector:
    """Turn a client's authorization request into a GitHub consent URL."""

    def __init__(
        self,
        store: CredentialStore,
        github_client: GitHubOAuthClient,
        state_codec: AuthorizationStateCodec,
    ) -> None:
        self._store = store
        self._github = github_client
        self._codec = state_codec

    def authorize(
        self,
        *,
        client_id: Optional[str],
        redirect_uri: Optional[str],
        response_type: Optional[str],
        callback_url: str,
        state: Optional[str] = None,
        scope: Optional[str] = None,
        code_challenge: Optional[str] = None,
        code_challenge_method: Optional[str] = None,
        resource: Optional[str] = None,
    ) -> str:
        """Return the upstream authorization URL for a validated request."""
        if not client_id or not redirect_uri or response_type != "code":
            raise InvalidRequest("Missing required parameters")

        client = self._store.validate_client(client_id)
        if client is None:
            raise InvalidClient("Invalid client")

        if redirect_uri not in client.redirect_uris:
            raise InvalidRequest("Invalid redirect URI")

        request_state = AuthorizationRequestState(
            client_id=client_id,
            redirect_uri=redirect_uri,
            response_type=response_type,
            state=state,
            scope=scope,
            code_challenge=code_challenge,
            code_challenge_method=code_challenge_method,
            resource=resource,
            issued_at=datetime.now(timezone.utc),
        )
        # PKCE stays with the proxy: GitHub never sees the client's challenge.
        authorization_url = self._github.build_authorization_url(
            state=self._codec.encode(request_state),
            redirect_uri=callback_url,
        )

        logger.info("Redirecting client %s to GitHub OAuth", client_id)
        return authorization_url


__all__ = ["AuthorizationRedirector"]
