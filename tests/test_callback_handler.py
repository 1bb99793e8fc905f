try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlsplit

import pytest

from mcp_oauth_proxy.clients.github_auth import AuthorizationStateCodec
from mcp_oauth_proxy.clients.json_snapshot import InMemorySnapshotStore
from mcp_oauth_proxy.models.oauth import RegisteredClient
from mcp_oauth_proxy.schemas.auth import AuthorizationRequestState
from mcp_oauth_proxy.services.callback import ProviderCallbackHandler
from mcp_oauth_proxy.services.credential_store import CredentialStore
from mcp_oauth_proxy.services.token_cipher import TokenCipherService

CLIENT_REDIRECT = "http://localhost:3000/callback"
CALLBACK_URL = "http://testserver/callback"


class RecordingGitHubClient:
    def __init__(self) -> None:
        self.calls: list[str] = []

    async def exchange_authorization_code(self, code: str, *, redirect_uri: str) -> str:
        self.calls.append("exchange")
        return "gho_upstream"

    async def fetch_user(self, access_token: str) -> dict:
        self.calls.append("user")
        return {"id": 1, "login": "octocat"}


@pytest.fixture()
def backend() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture()
def store(backend: InMemorySnapshotStore) -> CredentialStore:
    store = CredentialStore(backend)
    store.register_client(
        RegisteredClient(
            client_id="mcp_a",
            client_secret="secret-a",
            client_name="a",
            redirect_uris=[CLIENT_REDIRECT],
        )
    )
    return store


@pytest.fixture()
def github() -> RecordingGitHubClient:
    return RecordingGitHubClient()


@pytest.fixture()
def codec() -> AuthorizationStateCodec:
    return AuthorizationStateCodec("state-key")


@pytest.fixture()
def handler(store, github, codec) -> ProviderCallbackHandler:
    return ProviderCallbackHandler(
        store,
        github,
        codec,
        TokenCipherService(secret="cipher-key"),
        state_ttl_seconds=900,
    )


def _state(codec: AuthorizationStateCodec, *, client_id: str = "mcp_a", age: int = 0) -> str:
    return codec.encode(
        AuthorizationRequestState(
            client_id=client_id,
            redirect_uri=CLIENT_REDIRECT,
            state="s1",
            scope="read:user",
            issued_at=datetime.now(timezone.utc) - timedelta(seconds=age),
        )
    )


def _stored_codes(backend: InMemorySnapshotStore) -> dict:
    return (backend.load() or {}).get("auth_codes", {})


@pytest.mark.asyncio
async def test_callback_issues_code_for_live_request(handler, store, backend, github, codec):
    location = await handler.handle(
        code="gh-code", state=_state(codec), callback_url=CALLBACK_URL
    )

    query = parse_qs(urlsplit(location).query)
    assert location.startswith(CLIENT_REDIRECT)
    assert query["state"] == ["s1"]
    code = query["code"][0]
    assert store.get_auth_code(code).client_id == "mcp_a"
    assert list(_stored_codes(backend)) == [code]
    assert github.calls == ["exchange", "user"]


@pytest.mark.asyncio
async def test_expired_request_redirects_with_error(handler, backend, github, codec):
    location = await handler.handle(
        code="gh-code", state=_state(codec, age=2 * 3600), callback_url=CALLBACK_URL
    )

    assert location.startswith(CLIENT_REDIRECT)
    assert parse_qs(urlsplit(location).query) == {
        "error": ["server_error"],
        "error_description": ["Authorization request has expired"],
        "state": ["s1"],
    }
    assert _stored_codes(backend) == {}
    assert github.calls == []


@pytest.mark.asyncio
async def test_unregistered_client_redirects_with_error(handler, backend, github, codec):
    location = await handler.handle(
        code="gh-code",
        state=_state(codec, client_id="mcp_gone"),
        callback_url=CALLBACK_URL,
    )

    assert location.startswith(CLIENT_REDIRECT)
    assert parse_qs(urlsplit(location).query) == {
        "error": ["server_error"],
        "error_description": ["Invalid client"],
        "state": ["s1"],
    }
    assert _stored_codes(backend) == {}
    assert github.calls == []
