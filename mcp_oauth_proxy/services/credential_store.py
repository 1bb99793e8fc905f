"""Credential store owning registered clients, authorization codes and tokens."""

from __future__ import annotations

import hmac
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from mcp_oauth_proxy.clients.json_snapshot import InMemorySnapshotStore, SnapshotBackend
from mcp_oauth_proxy.core.logging import mask_secret
from mcp_oauth_proxy.models.oauth import (
    AccessTokenRecord,
    AuthorizationCodeRecord,
    RegisteredClient,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _load_collection(
    raw: Any, model: Type[RecordT], name: str
) -> Dict[str, RecordT]:
    records: Dict[str, RecordT] = {}
    if not isinstance(raw, dict):
        return records
    for key, value in raw.items():
        try:
            records[key] = model.model_validate(value)
        except ValidationError:
            logger.warning("Skipping malformed %s record %s", name, mask_secret(key))
    return records


class CredentialStore:
    """In-memory maps mirrored to a snapshot backend on every mutation.

    Snapshot I/O failures are logged and swallowed; the in-memory state stays
    authoritative for the running process.
    """

    def __init__(self, backend: SnapshotBackend | None = None) -> None:
        self._backend = backend or InMemorySnapshotStore()
        self._lock = threading.RLock()
        self._clients: Dict[str, RegisteredClient] = {}
        self._auth_codes: Dict[str, AuthorizationCodeRecord] = {}
        self._access_tokens: Dict[str, AccessTokenRecord] = {}
        self._load()

    def _load(self) -> None:
        try:
            snapshot = self._backend.load()
        except Exception:  # pylint: disable=broad-except
            logger.warning("Failed to load OAuth storage", exc_info=True)
            return
        if not snapshot:
            return

        self._clients = _load_collection(snapshot.get("clients"), RegisteredClient, "client")
        self._auth_codes = _load_collection(
            snapshot.get("auth_codes"), AuthorizationCodeRecord, "authorization code"
        )
        self._access_tokens = _load_collection(
            snapshot.get("access_tokens"), AccessTokenRecord, "access token"
        )
        logger.info(
            "Loaded %d clients, %d auth codes, %d access tokens from storage",
            len(self._clients),
            len(self._auth_codes),
            len(self._access_tokens),
        )

    def _save(self) -> None:
        snapshot = {
            "clients": {k: v.model_dump(mode="json") for k, v in self._clients.items()},
            "auth_codes": {
                k: v.model_dump(mode="json") for k, v in self._auth_codes.items()
            },
            "access_tokens": {
                k: v.model_dump(mode="json") for k, v in self._access_tokens.items()
            },
            "saved_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self._backend.save(snapshot)
        except Exception:  # pylint: disable=broad-except
            logger.warning("Failed to save OAuth storage", exc_info=True)

    # Clients

    def register_client(self, client: RegisteredClient) -> None:
        with self._lock:
            self._clients[client.client_id] = client
            self._save()
        logger.info("Stored client %s (%s)", client.client_id, client.client_name)

    def get_client(self, client_id: str) -> Optional[RegisteredClient]:
        return self._clients.get(client_id)

    def validate_client(
        self, client_id: str, client_secret: str | None = None
    ) -> Optional[RegisteredClient]:
        """Return the client, checking the secret only when one is supplied."""
        client = self._clients.get(client_id)
        if client is None:
            logger.info("Client %s not found", client_id)
            return None
        if client_secret and not hmac.compare_digest(
            client.client_secret.encode("utf-8"), client_secret.encode("utf-8")
        ):
            logger.info("Client secret mismatch for %s", client_id)
            return None
        return client

    def list_clients(self) -> List[RegisteredClient]:
        return list(self._clients.values())

    # Authorization codes

    def put_auth_code(self, code: str, record: AuthorizationCodeRecord) -> None:
        with self._lock:
            self._prune_locked(datetime.now(timezone.utc))
            self._auth_codes[code] = record
            self._save()

    def get_auth_code(self, code: str) -> Optional[AuthorizationCodeRecord]:
        return self._auth_codes.get(code)

    def delete_auth_code(self, code: str) -> None:
        with self._lock:
            if self._auth_codes.pop(code, None) is not None:
                self._save()

    def pop_auth_code(self, code: str) -> Optional[AuthorizationCodeRecord]:
        """Remove and return a code; only one caller can ever receive it."""
        with self._lock:
            record = self._auth_codes.pop(code, None)
            if record is not None:
                self._save()
            return record

    # Access tokens

    def put_access_token(self, token: str, record: AccessTokenRecord) -> None:
        with self._lock:
            self._prune_locked(datetime.now(timezone.utc))
            self._access_tokens[token] = record
            self._save()

    def get_access_token(self, token: str) -> Optional[AccessTokenRecord]:
        return self._access_tokens.get(token)

    def delete_access_token(self, token: str) -> None:
        with self._lock:
            if self._access_tokens.pop(token, None) is not None:
                self._save()

    # Maintenance

    def _prune_locked(self, now: datetime) -> int:
        expired_codes = [k for k, v in self._auth_codes.items() if v.is_expired(now)]
        expired_tokens = [k for k, v in self._access_tokens.items() if v.is_expired(now)]
        for key in expired_codes:
            del self._auth_codes[key]
        for key in expired_tokens:
            del self._access_tokens[key]
        removed = len(expired_codes) + len(expired_tokens)
        if removed:
            logger.debug("Pruned %d expired codes/tokens", removed)
        return removed

    def prune_expired(self, now: datetime | None = None) -> int:
        """Drop expired codes and tokens; returns how many were removed."""
        with self._lock:
            removed = self._prune_locked(now or datetime.now(timezone.utc))
            if removed:
                self._save()
            return removed


__all__ = ["CredentialStore"]
