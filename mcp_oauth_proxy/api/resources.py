"""
Bearer-protected routes backed by proxy access tokens, plus opt-in diagnostics.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query

from mcp_oauth_proxy.core.config import AppSettings
from mcp_oauth_proxy.core.logging import mask_secret
from mcp_oauth_proxy.dependencies import (
    AuthContextDependency,
    get_app_settings,
    get_credential_store,
)
from mcp_oauth_proxy.schemas import AuthContext

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/userinfo", status_code=HTTPStatus.OK)
async def userinfo(auth: AuthContext = AuthContextDependency) -> dict:
    """OIDC-style claims for the GitHub user behind the access token."""
    user = auth.user
    subject = user.get("id", user.get("login"))
    claims = {
        "sub": str(subject) if subject is not None else None,
        "name": user.get("name"),
        "preferred_username": user.get("login"),
        "email": user.get("email"),
        "picture": user.get("avatar_url"),
    }
    return {key: value for key, value in claims.items() if value is not None}


@router.get("/api/user", status_code=HTTPStatus.OK)
async def current_user(auth: AuthContext = AuthContextDependency) -> dict:
    """Return the identity, scopes and client bound to the access token."""
    return {"user": auth.user, "scopes": auth.scopes, "client_id": auth.client_id}


def _require_debug(settings: AppSettings) -> None:
    if not settings.debug_endpoints_enabled:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Not Found")


@router.get("/api/debug/clients", status_code=HTTPStatus.OK)
async def debug_clients(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    store: Annotated[Any, Depends(get_credential_store)],
) -> dict:
    """List registered clients without their secrets."""
    _require_debug(settings)
    clients = store.list_clients()
    return {
        "total_clients": len(clients),
        "clients": [
            {
                "client_id": client.client_id,
                "client_name": client.client_name,
                "redirect_uris": client.redirect_uris,
                "created_at": client.created_at.isoformat(),
            }
            for client in clients
        ],
    }


@router.get("/api/debug/auth-codes", status_code=HTTPStatus.OK)
async def debug_auth_code(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    store: Annotated[Any, Depends(get_credential_store)],
    code: str | None = Query(default=None),
) -> dict:
    """Report whether an authorization code is pending, without its upstream token."""
    _require_debug(settings)
    if not code:
        return {"message": "Use ?code=CODE to check specific authorization code"}

    record = store.get_auth_code(code)
    logger.debug("Debug lookup for code %s", mask_secret(code))
    if record is None:
        return {"code": mask_secret(code), "found": False, "data": None}
    return {
        "code": mask_secret(code),
        "found": True,
        "data": {
            "client_id": record.client_id,
            "redirect_uri": record.redirect_uri,
            "scope": record.scope,
            "has_code_challenge": bool(record.code_challenge),
            "expires_at": record.expires_at.isoformat(),
        },
    }
