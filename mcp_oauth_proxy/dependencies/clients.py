"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from mcp_oauth_proxy.clients import (
    AuthorizationStateCodec,
    GitHubOAuthClient,
    InMemorySnapshotStore,
    JsonFileSnapshotStore,
    SQLiteSnapshotStore,
)
from mcp_oauth_proxy.core.config import AppSettings, get_settings
from mcp_oauth_proxy.dependencies.config import get_app_settings
from mcp_oauth_proxy.services import (
    AuthorizationRedirector,
    ClientRegistrar,
    CredentialStore,
    ProviderCallbackHandler,
    TokenCipherService,
    TokenExchangeService,
    TokenValidator,
)

SettingsDep = Annotated[AppSettings, Depends(get_app_settings)]


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_credential_store() -> CredentialStore:
    """Provide the process-wide credential store for the configured backend."""
    storage = _settings().storage
    if storage.backend == "sqlite":
        backend = SQLiteSnapshotStore(storage.path)
    elif storage.backend == "memory":
        backend = InMemorySnapshotStore()
    else:
        backend = JsonFileSnapshotStore(storage.path)
    return CredentialStore(backend)


@lru_cache()
def get_state_codec() -> AuthorizationStateCodec:
    """Provide a state codec keyed by the signing secret or GitHub client secret."""
    settings = _settings()
    secret = settings.security.state_signing_secret or settings.github.client_secret
    return AuthorizationStateCodec(secret_key=secret)


@lru_cache()
def get_github_oauth_client() -> GitHubOAuthClient:
    """Create a singleton GitHub OAuth client."""
    settings = _settings()
    return GitHubOAuthClient(
        settings.github,
        settings.oauth,
        timeout=settings.upstream_timeout_seconds,
    )


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for upstream token storage."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.github.client_secret
    return TokenCipherService(secret=secret)


StoreDep = Annotated[CredentialStore, Depends(get_credential_store)]
GitHubDep = Annotated[GitHubOAuthClient, Depends(get_github_oauth_client)]
CodecDep = Annotated[AuthorizationStateCodec, Depends(get_state_codec)]


def get_client_registrar(store: StoreDep, settings: SettingsDep) -> ClientRegistrar:
    """Build the dynamic client registrar."""
    return ClientRegistrar(store, default_scopes=settings.oauth.default_client_scopes)


def get_authorization_redirector(
    store: StoreDep, github_client: GitHubDep, state_codec: CodecDep
) -> AuthorizationRedirector:
    """Build the authorization redirector."""
    return AuthorizationRedirector(store, github_client, state_codec)


def get_callback_handler(
    store: StoreDep,
    github_client: GitHubDep,
    state_codec: CodecDep,
    token_cipher: Annotated[TokenCipherService, Depends(get_token_cipher_service)],
    settings: SettingsDep,
) -> ProviderCallbackHandler:
    """Build the GitHub callback handler."""
    return ProviderCallbackHandler(
        store,
        github_client,
        state_codec,
        token_cipher,
        auth_code_ttl_seconds=settings.oauth.auth_code_ttl_seconds,
        state_ttl_seconds=settings.oauth.state_ttl_seconds,
    )


def get_token_exchange_service(
    store: StoreDep, settings: SettingsDep
) -> TokenExchangeService:
    """Build the token exchange service."""
    return TokenExchangeService(
        store,
        access_token_ttl_seconds=settings.oauth.access_token_ttl_seconds,
        enforce_pkce=settings.oauth.enforce_pkce,
    )


def get_token_validator(store: StoreDep, settings: SettingsDep) -> TokenValidator:
    """Build the bearer token validator."""
    return TokenValidator(store, default_scopes=settings.oauth.required_scopes)


__all__ = [
    "get_authorization_redirector",
    "get_callback_handler",
    "get_client_registrar",
    "get_credential_store",
    "get_github_oauth_client",
    "get_state_codec",
    "get_token_cipher_service",
    "get_token_exchange_service",
    "get_token_validator",
]
