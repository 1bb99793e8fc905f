"""Dynamic client registration (RFC 7591)."""

from __future__ import annotations

import logging
import secrets
from typing import Iterable, Optional, Sequence
from urllib.parse import urlparse

from mcp_oauth_proxy.core.errors import InvalidRequest
from mcp_oauth_proxy.models.oauth import RegisteredClient
from mcp_oauth_proxy.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

CLIENT_ID_PREFIX = "mcp_"


def _is_valid_redirect_uri(uri: str) -> bool:
    parsed = urlparse(uri)
    # Private-use schemes (com.example.app:/cb) carry no host.
    return bool(parsed.scheme) and not parsed.fragment


class ClientRegistrar:
    """Validate registration requests and mint client credentials."""

    def __init__(
        self,
        store: CredentialStore,
        *,
        default_scopes: Iterable[str] = ("read:user", "user:email"),
    ) -> None:
        self._store = store
        self._default_scopes = list(default_scopes)

    def register(
        self,
        client_name: Optional[str],
        redirect_uris: Optional[Sequence[str]],
        grant_types: Optional[Sequence[str]] = None,
        response_types: Optional[Sequence[str]] = None,
        scopes: Optional[Sequence[str]] = None,
    ) -> RegisteredClient:
        if not client_name or not redirect_uris:
            raise InvalidRequest("Missing required fields: client_name, redirect_uris")

        invalid = [uri for uri in redirect_uris if not _is_valid_redirect_uri(uri)]
        if invalid:
            raise InvalidRequest(
                f"Redirect URIs must be absolute and fragment-free: {', '.join(invalid)}"
            )

        client = RegisteredClient(
            client_id=f"{CLIENT_ID_PREFIX}{secrets.token_hex(16)}",
            client_secret=secrets.token_hex(32),
            client_name=client_name,
            redirect_uris=list(redirect_uris),
            grant_types=list(grant_types or ["authorization_code"]),
            response_types=list(response_types or ["code"]),
            scopes=list(scopes or self._default_scopes),
        )
        self._store.register_client(client)

        logger.info("Registered new MCP client: %s (%s)", client_name, client.client_id)
        return client


__all__ = ["CLIENT_ID_PREFIX", "ClientRegistrar"]
