"""
FastAPI dependency providers.

All injectable dependencies are plain functions used with Depends(); the
objects they hand out are built once by the app factory and kept on
app.state, so tests can swap any of them before the first request.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import AppSettings
from errors import AuthenticationError
from schemas.models.user import UserDoc
from services.identity_service import IdentityService

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    identity: IdentityService = Depends(get_identity_service),
) -> UserDoc:
    """Resolve the Bearer access token to a user, or answer 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Authentication required")
    return await identity.authenticate(credentials.credentials)
