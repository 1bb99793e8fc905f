"""Discovery documents for the proxy (RFC 8414, RFC 9728, OIDC discovery)."""

from __future__ import annotations

from typing import Any, Dict

from mcp_oauth_proxy.core.config import AppSettings

RESOURCE_TYPE = "mcp-server"


def authorization_server_metadata(base_url: str, settings: AppSettings) -> Dict[str, Any]:
    """OAuth 2.0 Authorization Server Metadata describing the proxy endpoints."""
    return {
        "issuer": base_url,
        "authorization_endpoint": f"{base_url}/authorize",
        "token_endpoint": f"{base_url}/token",
        "registration_endpoint": f"{base_url}/register",
        "userinfo_endpoint": f"{base_url}/userinfo",
        "scopes_supported": list(settings.oauth.supported_scopes),
        "response_types_supported": ["code"],
        "response_modes_supported": ["query"],
        "grant_types_supported": ["authorization_code"],
        "token_endpoint_auth_methods_supported": ["client_secret_post"],
        "code_challenge_methods_supported": ["S256", "plain"],
    }


def openid_configuration(base_url: str, settings: AppSettings) -> Dict[str, Any]:
    """OIDC discovery document; some MCP clients probe this before RFC 8414."""
    metadata = authorization_server_metadata(base_url, settings)
    metadata.update(
        {
            "subject_types_supported": ["public"],
            "claims_supported": ["sub", "name", "preferred_username", "email", "picture"],
        }
    )
    return metadata


def protected_resource_metadata(
    base_url: str, settings: AppSettings, *, resource_path: str = ""
) -> Dict[str, Any]:
    """OAuth 2.0 Protected Resource Metadata for the MCP endpoint."""
    return {
        "resource": f"{base_url}{resource_path}",
        "authorization_servers": [base_url],
        "scopes_supported": list(settings.oauth.supported_scopes),
        "bearer_methods_supported": ["header"],
        "resource_type": RESOURCE_TYPE,
        "resource_description": settings.resource_description,
    }


__all__ = [
    "authorization_server_metadata",
    "openid_configuration",
    "protected_resource_metadata",
]
