"""Service layer exports."""

from .authorization import AuthorizationRedirector
from .callback import ProviderCallbackHandler
from .credential_store import CredentialStore
from .registrar import ClientRegistrar
from .token_cipher import TokenCipherService
from .token_exchange import TokenExchangeService
from .token_validator import TokenValidator

__all__ = [
    "AuthorizationRedirector",
    "ClientRegistrar",
    "CredentialStore",
    "ProviderCallbackHandler",
    "TokenCipherService",
    "TokenExchangeService",
    "TokenValidator",
]
