try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import base64
import json
from datetime import datetime, timezone

import pytest

from mcp_oauth_proxy.clients.github_auth import AuthorizationStateCodec, InvalidStateError
from mcp_oauth_proxy.schemas.auth import AuthorizationRequestState


def _state(**overrides) -> AuthorizationRequestState:
    values = {
        "client_id": "mcp_client",
        "redirect_uri": "http://localhost:3000/cb?tab=1",
        "state": "client-state-xyz",
        "scope": "read:user",
        "code_challenge": "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM",
        "code_challenge_method": "S256",
        "resource": "https://mcp.example.com/mcp",
        "issued_at": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return AuthorizationRequestState(**values)


def test_all_request_fields_survive_the_round_trip() -> None:
    codec = AuthorizationStateCodec("signing-key")
    original = _state()

    decoded = codec.decode(codec.encode(original))

    assert decoded == original


def test_absent_optional_fields_stay_absent() -> None:
    codec = AuthorizationStateCodec("signing-key")

    decoded = codec.decode(
        codec.encode(_state(state=None, code_challenge=None, code_challenge_method=None))
    )

    assert decoded.state is None
    assert decoded.code_challenge is None


def test_encoded_state_is_url_safe() -> None:
    encoded = AuthorizationStateCodec("signing-key").encode(_state())

    assert "+" not in encoded and "/" not in encoded


def test_tampered_payload_is_rejected() -> None:
    codec = AuthorizationStateCodec("signing-key")
    raw = base64.urlsafe_b64decode(codec.encode(_state()))
    signature, payload = raw[:32], json.loads(raw[32:])
    payload["redirect_uri"] = "https://attacker.example/steal"
    forged = base64.urlsafe_b64encode(
        signature + json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()
    ).decode()

    with pytest.raises(InvalidStateError):
        codec.decode(forged)


def test_state_signed_with_another_key_is_rejected() -> None:
    encoded = AuthorizationStateCodec("key-one").encode(_state())

    with pytest.raises(InvalidStateError):
        AuthorizationStateCodec("key-two").decode(encoded)


@pytest.mark.parametrize("garbage", ["", "not base64!!", "YWJj"])
def test_garbage_state_is_rejected(garbage: str) -> None:
    with pytest.raises(InvalidStateError):
        AuthorizationStateCodec("signing-key").decode(garbage)


def test_unknown_version_is_rejected() -> None:
    codec = AuthorizationStateCodec("signing-key")

    with pytest.raises(InvalidStateError):
        codec.decode(codec.encode(_state(v=2)))
