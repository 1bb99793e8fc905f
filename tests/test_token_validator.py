try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timedelta, timezone

import pytest

from mcp_oauth_proxy.core.errors import InvalidToken
from mcp_oauth_proxy.models.oauth import AccessTokenRecord
from mcp_oauth_proxy.services.credential_store import CredentialStore
from mcp_oauth_proxy.services.token_validator import TokenValidator


def _store_with_token(*, scope: str | None = "read:user user:email", ttl: int = 3600):
    store = CredentialStore()
    store.put_access_token(
        "mcp_at_abc",
        AccessTokenRecord(
            token="mcp_at_abc",
            client_id="mcp_client",
            user={"id": 1, "login": "octocat"},
            scope=scope,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=ttl),
        ),
    )
    return store


@pytest.mark.parametrize("header", ["Bearer mcp_at_abc", "bearer   mcp_at_abc", "mcp_at_abc"])
def test_valid_token_resolves_context(header: str) -> None:
    context = TokenValidator(_store_with_token()).validate(header)

    assert context.token == "mcp_at_abc"
    assert context.client_id == "mcp_client"
    assert context.scopes == ["read:user", "user:email"]
    assert context.user["login"] == "octocat"


def test_missing_scope_falls_back_to_defaults() -> None:
    validator = TokenValidator(_store_with_token(scope=None), default_scopes=["read:user"])

    assert validator.validate("Bearer mcp_at_abc").scopes == ["read:user"]


@pytest.mark.parametrize("header", [None, "", "Bearer ", "Bearer"])
def test_missing_token(header) -> None:
    with pytest.raises(InvalidToken, match="Missing access token"):
        TokenValidator(CredentialStore()).validate(header)


def test_unknown_token() -> None:
    with pytest.raises(InvalidToken, match="Invalid or expired access token"):
        TokenValidator(_store_with_token()).validate("Bearer mcp_at_unknown")


def test_expired_token() -> None:
    store = _store_with_token()
    store.get_access_token("mcp_at_abc").expires_at = datetime.now(
        timezone.utc
    ) - timedelta(seconds=1)

    with pytest.raises(InvalidToken, match="Access token has expired"):
        TokenValidator(store).validate("Bearer mcp_at_abc")
