"""API key authentication for the HTTP endpoints."""

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def is_auth_enabled(settings: Settings) -> bool:
    """Authentication is on when WPTOMEDIUM_KEY is set to a non-blank value."""
    return bool(settings.auth.api_key and settings.auth.api_key.strip())


def verify_api_key(api_key: str, settings: Settings) -> bool:
    if not is_auth_enabled(settings):
        return True
    return secrets.compare_digest(api_key, settings.auth.api_key)


def _unauthorized(error: str, error_type: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"success": False, "error": error, "error_type": error_type},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_api_key(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """
    Extract and check the API key of a request.

    Accepts either ``Authorization: Bearer <key>`` or ``X-API-Key: <key>``.

    Returns:
        The API key, or None when authentication is disabled

    Raises:
        HTTPException: 401 if the key is missing or wrong
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    if not is_auth_enabled(settings):
        return None

    api_key = None
    if credentials and credentials.credentials:
        api_key = credentials.credentials
    elif "x-api-key" in request.headers:
        api_key = request.headers["x-api-key"]

    if not api_key:
        logger.warning("API key authentication required but not provided")
        raise _unauthorized(
            "API key required. Provide via Authorization header or X-API-Key header",
            "authentication_required",
        )

    if not verify_api_key(api_key, settings):
        logger.warning("Invalid API key provided")
        raise _unauthorized("Invalid API key", "authentication_failed")

    return api_key


def get_auth_status(settings: Settings) -> dict:
    """Authentication summary for the health endpoint."""
    auth_enabled = is_auth_enabled(settings)
    return {
        "auth_enabled": auth_enabled,
        "auth_methods": ["Authorization: Bearer <api_key>", "X-API-Key: <api_key>"]
        if auth_enabled
        else None,
    }
