try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from mcp_oauth_proxy.services.token_cipher import TokenCipherService


def test_github_token_is_not_stored_in_clear() -> None:
    cipher = TokenCipherService(secret="super-secret-key")
    github_token = "gho_upstream-token"

    encrypted = cipher.encrypt(github_token)
    assert github_token not in encrypted
    assert cipher.decrypt(encrypted) == github_token


def test_ciphertext_from_another_secret_is_rejected() -> None:
    encrypted = TokenCipherService(secret="first-secret").encrypt("gho_token")

    with pytest.raises(ValueError):
        TokenCipherService(secret="second-secret").decrypt(encrypted)


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")
