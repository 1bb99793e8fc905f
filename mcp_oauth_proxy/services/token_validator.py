"""Resolve proxy bearer tokens into an auth context for protected requests."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from mcp_oauth_proxy.core.errors import InvalidToken
from mcp_oauth_proxy.core.logging import mask_secret
from mcp_oauth_proxy.schemas.auth import AuthContext
from mcp_oauth_proxy.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

_BEARER_PREFIX = re.compile(r"^Bearer(?:\s+|$)", re.IGNORECASE)


class TokenValidator:
    """Look up proxy access tokens; never contacts GitHub."""

    def __init__(
        self, store: CredentialStore, *, default_scopes: Iterable[str] = ("read:user",)
    ) -> None:
        self._store = store
        self._default_scopes = list(default_scopes)

    def validate(self, bearer_token: Optional[str]) -> AuthContext:
        token = _BEARER_PREFIX.sub("", (bearer_token or "").strip())
        if not token:
            raise InvalidToken("Missing access token")

        record = self._store.get_access_token(token)
        if record is None:
            logger.info("Unknown access token %s", mask_secret(token))
            raise InvalidToken("Invalid or expired access token")

        if record.is_expired():
            raise InvalidToken("Access token has expired")

        scopes = record.scope.split() if record.scope else list(self._default_scopes)
        return AuthContext(
            token=token,
            client_id=record.client_id,
            scopes=scopes,
            user=record.user,
            expires_at=record.expires_at,
        )


__all__ = ["TokenValidator"]
