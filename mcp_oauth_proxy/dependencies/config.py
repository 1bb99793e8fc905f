"""
FastAPI dependency for injecting configuration.
"""

from mcp_oauth_proxy.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings.

    Routes and service factories resolve settings through this function so a
    test can swap them with ``app.dependency_overrides``.
    """
    return get_settings()


__all__ = ["get_app_settings"]
