"""Expose dependency helpers for FastAPI routers."""

from .auth import AuthContextDependency, require_auth_context
from .clients import (
    get_authorization_redirector,
    get_callback_handler,
    get_client_registrar,
    get_credential_store,
    get_github_oauth_client,
    get_state_codec,
    get_token_cipher_service,
    get_token_exchange_service,
    get_token_validator,
)
from .config import get_app_settings

__all__ = [
    "AuthContextDependency",
    "get_app_settings",
    "get_authorization_redirector",
    "get_callback_handler",
    "get_client_registrar",
    "get_credential_store",
    "get_github_oauth_client",
    "get_state_codec",
    "get_token_cipher_service",
    "get_token_exchange_service",
    "get_token_validator",
    "require_auth_context",
]
