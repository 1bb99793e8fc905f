"""Symmetric encryption for upstream provider tokens kept in the snapshot."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken


def _derive_key(secret: str) -> bytes:
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())


class TokenCipherService:
    """Encrypt GitHub access tokens before they are written to storage."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        self._fernet = Fernet(_derive_key(secret))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Recover a stored GitHub token.

        Issuance never reads the token back; this is the hook for calls made
        to GitHub on the user's behalf. Raises ``ValueError`` when the secret
        has been rotated or the ciphertext is corrupt.
        """
        try:
            return self._fernet.decrypt(ciphertext.encode("utf-8")).decode("utf-8")
        except InvalidToken as exc:
            raise ValueError("Stored upstream token could not be decrypted.") from exc


__all__ = ["TokenCipherService"]
