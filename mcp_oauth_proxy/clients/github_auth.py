"""
GitHub OAuth utilities.

These helpers carry the client's authorization request through GitHub and
talk to GitHub's token and user endpoints on the proxy's behalf.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
from hashlib import sha256
from typing import Any, Dict
from urllib.parse import urlencode

import httpx
from fastapi import status
from pydantic import ValidationError

from mcp_oauth_proxy.core.config import GitHubSettings, OAuthSettings
from mcp_oauth_proxy.schemas.auth import AuthorizationRequestState

STATE_VERSION = 1
_SIGNATURE_SIZE = 32


class InvalidStateError(ValueError):
    """Raised when an encoded authorization state cannot be trusted."""


class UpstreamOAuthError(Exception):
    """Raised when GitHub rejects a request or cannot be reached."""


class AuthorizationStateCodec:
    """Encode and decode authorization state values to guard against tampering."""

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key.encode("utf-8")

    def _sign(self, serialized: bytes) -> bytes:
        return hmac.new(self._secret_key, serialized, sha256).digest()

    def encode(self, state: AuthorizationRequestState) -> str:
        payload = state.model_dump(mode="json")
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode(
            "utf-8"
        )
        return base64.urlsafe_b64encode(self._sign(serialized) + serialized).decode(
            "utf-8"
        )

    def decode(self, token: str) -> AuthorizationRequestState:
        try:
            decoded = base64.urlsafe_b64decode(token.encode("utf-8"))
        except (binascii.Error, ValueError) as exc:
            raise InvalidStateError("State is not valid base64.") from exc

        signature, serialized = decoded[:_SIGNATURE_SIZE], decoded[_SIGNATURE_SIZE:]
        if not serialized or not hmac.compare_digest(signature, self._sign(serialized)):
            raise InvalidStateError("Invalid OAuth state signature.")

        try:
            payload = json.loads(serialized)
        except ValueError as exc:
            raise InvalidStateError("State payload is not valid JSON.") from exc

        if not isinstance(payload, dict) or payload.get("v") != STATE_VERSION:
            raise InvalidStateError("Unsupported OAuth state version.")

        try:
            return AuthorizationRequestState.model_validate(payload)
        except ValidationError as exc:
            raise InvalidStateError("State payload is missing required fields.") from exc


class GitHubOAuthClient:
    """Build GitHub authorization URLs, exchange codes and fetch the user."""

    USER_AGENT = "mcp-oauth-proxy"

    def __init__(
        self,
        github_settings: GitHubSettings,
        oauth_settings: OAuthSettings,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._github = github_settings
        self._oauth = oauth_settings
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def build_authorization_url(self, *, state: str, redirect_uri: str) -> str:
        """Construct the GitHub consent URL.

        The scope is always the proxy's own upstream scope, whatever the MCP
        client asked for.
        """
        params = {
            "client_id": self._github.client_id,
            "redirect_uri": redirect_uri,
            "scope": self._oauth.upstream_scope,
            "state": state,
            "response_type": "code",
        }
        return f"{self._github.authorization_endpoint}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str, *, redirect_uri: str) -> str:
        """Exchange a GitHub authorization code for a GitHub access token."""
        payload = {
            "client_id": self._github.client_id,
            "client_secret": self._github.client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    self._github.token_endpoint,
                    data=payload,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise UpstreamOAuthError(f"GitHub token exchange failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise UpstreamOAuthError(
                f"GitHub token exchange failed: {response.status_code} - {response.text}"
            )

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise UpstreamOAuthError(
                f"GitHub token exchange returned a non-JSON body: {response.text}"
            ) from exc

        if token_payload.get("error"):
            raise UpstreamOAuthError(
                "GitHub OAuth error: "
                f"{token_payload.get('error_description') or token_payload['error']}"
            )

        access_token = token_payload.get("access_token")
        if not access_token:
            raise UpstreamOAuthError("No access token received from GitHub")

        return access_token

    async def fetch_user(self, access_token: str) -> Dict[str, Any]:
        """Return the GitHub profile of the user owning ``access_token``."""
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.USER_AGENT,
        }

        try:
            async with self._client() as client:
                response = await client.get(self._github.userinfo_endpoint, headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamOAuthError(f"Failed to fetch user info: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise UpstreamOAuthError(
                f"Failed to fetch user info: {response.status_code} - {response.text}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamOAuthError("GitHub returned an unreadable user profile") from exc


__all__ = [
    "AuthorizationStateCodec",
    "GitHubOAuthClient",
    "InvalidStateError",
    "UpstreamOAuthError",
]
