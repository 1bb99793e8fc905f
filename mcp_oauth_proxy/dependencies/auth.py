"""Bearer-token guard used by protected resources."""

from typing import Annotated

from fastapi import Depends, Request

from mcp_oauth_proxy.dependencies.clients import get_token_validator
from mcp_oauth_proxy.schemas.auth import AuthContext
from mcp_oauth_proxy.services import TokenValidator


def require_auth_context(
    request: Request,
    validator: Annotated[TokenValidator, Depends(get_token_validator)],
) -> AuthContext:
    """Resolve the request's ``Authorization`` header or fail with invalid_token."""
    return validator.validate(request.headers.get("authorization"))


AuthContextDependency = Depends(require_auth_context)

__all__ = ["AuthContextDependency", "require_auth_context"]
