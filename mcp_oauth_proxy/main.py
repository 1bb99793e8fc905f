"""
FastAPI application entrypoint for the MCP OAuth proxy.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mcp_oauth_proxy.api.resources import router as resource_router
from mcp_oauth_proxy.api.routes import router as oauth_router
from mcp_oauth_proxy.core.config import get_settings
from mcp_oauth_proxy.core.errors import InvalidRequest, InvalidToken, OAuthError
from mcp_oauth_proxy.core.logging import configure_logging
from mcp_oauth_proxy.utils.http import public_base_url

logger = logging.getLogger(__name__)


async def _oauth_error_handler(request: Request, exc: OAuthError) -> JSONResponse:
    headers = {}
    if isinstance(exc, InvalidToken):
        base_url = public_base_url(request, get_settings().public_base_url)
        headers["WWW-Authenticate"] = (
            f'Bearer error="{exc.error}", '
            f'resource_metadata="{base_url}/.well-known/oauth-protected-resource"'
        )
    return JSONResponse(
        status_code=int(exc.status_code), content=exc.to_dict(), headers=headers
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Malformed request to %s: %s", request.url.path, exc.errors())
    error = InvalidRequest("Malformed request body or parameters")
    return JSONResponse(status_code=int(error.status_code), content=error.to_dict())


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="MCP OAuth Proxy",
        version="0.1.0",
        description="OAuth 2.1 broker between MCP clients and GitHub.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "mcp-protocol-version"],
    )
    app.add_exception_handler(OAuthError, _oauth_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(oauth_router)
    app.include_router(resource_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
