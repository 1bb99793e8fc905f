"""
Application configuration models and helpers.

Centralizes settings for the OAuth proxy so the HTTP layer, the credential
store and the upstream provider client share one configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal, Optional

import os

from pydantic import AnyHttpUrl, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


def _split_csv(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    return tuple(item.strip() for item in value.split(",") if item.strip())


class GitHubSettings(BaseSettings):
    """Credentials and endpoints of the upstream GitHub OAuth App."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    client_id: str = Field(..., validation_alias="GITHUB_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="GITHUB_CLIENT_SECRET")
    redirect_uri: Optional[AnyHttpUrl] = Field(
        None,
        validation_alias="GITHUB_REDIRECT_URI",
        description=(
            "Fixed callback URL registered with GitHub. Derived from the public "
            "base URL when omitted."
        ),
    )
    authorization_endpoint: str = Field(
        "https://github.com/login/oauth/authorize",
        validation_alias="GITHUB_AUTHORIZATION_ENDPOINT",
    )
    token_endpoint: str = Field(
        "https://github.com/login/oauth/access_token",
        validation_alias="GITHUB_TOKEN_ENDPOINT",
    )
    userinfo_endpoint: str = Field(
        "https://api.github.com/user", validation_alias="GITHUB_USERINFO_ENDPOINT"
    )


class OAuthSettings(BaseSettings):
    """Lifetimes and scope policy of the proxy's own OAuth flow."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    upstream_scope: str = Field("read:user", validation_alias="OAUTH_UPSTREAM_SCOPE")
    supported_scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("read:user",), validation_alias="OAUTH_SUPPORTED_SCOPES"
    )
    default_client_scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("read:user", "user:email"), validation_alias="OAUTH_DEFAULT_CLIENT_SCOPES"
    )
    auth_code_ttl_seconds: int = Field(600, validation_alias="OAUTH_AUTH_CODE_TTL")
    access_token_ttl_seconds: int = Field(
        3600, validation_alias="OAUTH_ACCESS_TOKEN_TTL"
    )
    state_ttl_seconds: int = Field(900, validation_alias="OAUTH_STATE_TTL")
    enforce_pkce: bool = Field(
        True,
        validation_alias="OAUTH_ENFORCE_PKCE",
        description=(
            "Verify code_verifier against the stored code_challenge. When false "
            "any verifier is accepted once a challenge was recorded."
        ),
    )

    @field_validator("supported_scopes", "default_client_scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        return _split_csv(value)

    @property
    def required_scopes(self) -> list[str]:
        return list(self.supported_scopes)


class StorageSettings(BaseSettings):
    """Where the credential snapshot lives."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    backend: Literal["json", "sqlite", "memory"] = Field(
        "json", validation_alias="OAUTH_STORAGE_BACKEND"
    )
    path: str = Field(".oauth-storage.json", validation_alias="OAUTH_STORAGE_PATH")


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the key that encrypts upstream tokens at rest."
        ),
    )
    state_signing_secret: Optional[str] = Field(
        None,
        validation_alias="STATE_SIGNING_SECRET",
        description="HMAC key for the authorization state carried through GitHub.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    public_base_url: Optional[HttpUrl] = Field(
        None,
        validation_alias="PUBLIC_BASE_URL",
        description=(
            "Externally visible origin of the proxy. Taken from the request when "
            "omitted."
        ),
    )
    upstream_timeout_seconds: float = Field(
        10.0, validation_alias="UPSTREAM_TIMEOUT_SECONDS"
    )
    debug_endpoints_enabled: bool = Field(
        False, validation_alias="DEBUG_ENDPOINTS_ENABLED"
    )
    cors_allow_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        ("*",), validation_alias="CORS_ALLOW_ORIGINS"
    )
    resource_description: str = Field(
        "MCP Server with GitHub OAuth authentication",
        validation_alias="RESOURCE_DESCRIPTION",
    )
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    github: GitHubSettings = Field(default_factory=GitHubSettings)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        return _split_csv(value)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GitHubSettings",
    "OAuthSettings",
    "SecuritySettings",
    "StorageSettings",
    "get_settings",
]
