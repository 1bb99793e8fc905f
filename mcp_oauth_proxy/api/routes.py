"""
FastAPI routes for the OAuth proxy: discovery, registration, authorize,
GitHub callback and token exchange.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from mcp_oauth_proxy.core.config import AppSettings
from mcp_oauth_proxy.dependencies import (
    get_app_settings,
    get_authorization_redirector,
    get_callback_handler,
    get_client_registrar,
    get_token_exchange_service,
)
from mcp_oauth_proxy.schemas import ClientRegistrationRequest, ClientRegistrationResponse
from mcp_oauth_proxy.services import metadata
from mcp_oauth_proxy.utils.http import public_base_url

router = APIRouter()
logger = logging.getLogger(__name__)

_NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


def _callback_url(request: Request, settings: AppSettings) -> str:
    if settings.github.redirect_uri:
        return str(settings.github.redirect_uri)
    return f"{public_base_url(request, settings.public_base_url)}/callback"


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/.well-known/oauth-authorization-server")
@router.get("/.well-known/oauth-authorization-server/{path:path}")
async def oauth_authorization_server(
    request: Request,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> dict:
    """OAuth 2.0 Authorization Server Metadata (RFC 8414)."""
    base_url = public_base_url(request, settings.public_base_url)
    return metadata.authorization_server_metadata(base_url, settings)


@router.get("/.well-known/openid-configuration")
async def openid_configuration(
    request: Request,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> dict:
    """OpenID Connect discovery document."""
    base_url = public_base_url(request, settings.public_base_url)
    return metadata.openid_configuration(base_url, settings)


@router.get("/.well-known/oauth-protected-resource")
async def oauth_protected_resource(
    request: Request,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> dict:
    """OAuth 2.0 Protected Resource Metadata (RFC 9728)."""
    base_url = public_base_url(request, settings.public_base_url)
    return metadata.protected_resource_metadata(base_url, settings)


@router.get("/.well-known/oauth-protected-resource/mcp")
async def oauth_protected_resource_mcp(
    request: Request,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> dict:
    """Protected Resource Metadata for the MCP transport endpoint."""
    base_url = public_base_url(request, settings.public_base_url)
    return metadata.protected_resource_metadata(base_url, settings, resource_path="/mcp")


@router.post(
    "/register",
    response_model=ClientRegistrationResponse,
    status_code=HTTPStatus.CREATED,
)
async def register_client(
    payload: ClientRegistrationRequest,
    registrar: Annotated[Any, Depends(get_client_registrar)],
) -> ClientRegistrationResponse:
    """OAuth 2.0 Dynamic Client Registration (RFC 7591)."""
    client = registrar.register(
        client_name=payload.client_name,
        redirect_uris=payload.redirect_uris,
        grant_types=payload.grant_types,
        response_types=payload.response_types,
        scopes=payload.scopes,
    )
    return ClientRegistrationResponse(
        client_id=client.client_id,
        client_secret=client.client_secret,
        client_id_issued_at=int(client.created_at.timestamp()),
        client_secret_expires_at=0,
        client_name=client.client_name,
        redirect_uris=client.redirect_uris,
        grant_types=client.grant_types,
        response_types=client.response_types,
        scopes=" ".join(client.scopes),
    )


@router.get("/authorize")
async def authorize(
    request: Request,
    redirector: Annotated[Any, Depends(get_authorization_redirector)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    client_id: str | None = Query(default=None),
    redirect_uri: str | None = Query(default=None),
    response_type: str | None = Query(default=None),
    state: str | None = Query(default=None),
    scope: str | None = Query(default=None),
    code_challenge: str | None = Query(default=None),
    code_challenge_method: str | None = Query(default=None),
    resource: str | None = Query(default=None),
) -> RedirectResponse:
    """Validate the client's request and send the user-agent to GitHub."""
    authorization_url = redirector.authorize(
        client_id=client_id,
        redirect_uri=redirect_uri,
        response_type=response_type,
        callback_url=_callback_url(request, settings),
        state=state,
        scope=scope,
        code_challenge=code_challenge,
        code_challenge_method=code_challenge_method,
        resource=resource,
    )
    return RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)


@router.get("/callback")
async def oauth_callback(
    request: Request,
    handler: Annotated[Any, Depends(get_callback_handler)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    error: str | None = Query(default=None),
    error_description: str | None = Query(default=None),
) -> RedirectResponse:
    """Receive GitHub's redirect and bounce back to the MCP client."""
    redirect_target = await handler.handle(
        code=code,
        state=state,
        callback_url=_callback_url(request, settings),
        error=error,
        error_description=error_description,
    )
    return RedirectResponse(url=redirect_target, status_code=HTTPStatus.FOUND)


@router.post("/token")
async def issue_token(
    service: Annotated[Any, Depends(get_token_exchange_service)],
    grant_type: str | None = Form(default=None),
    code: str | None = Form(default=None),
    client_id: str | None = Form(default=None),
    client_secret: str | None = Form(default=None),
    redirect_uri: str | None = Form(default=None),
    code_verifier: str | None = Form(default=None),
) -> JSONResponse:
    """Exchange a proxy authorization code for a proxy access token."""
    token = service.exchange(
        grant_type=grant_type,
        code=code,
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uri,
        code_verifier=code_verifier,
    )
    return JSONResponse(
        content=token.model_dump(exclude_none=True), headers=_NO_STORE_HEADERS
    )
