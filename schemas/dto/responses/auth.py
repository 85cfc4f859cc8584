"""
Response DTOs for the identity endpoints.

UserProfileResponse    public user shape used by every endpoint below
TokenPairResponse      access/refresh pair with expiry instants
RegisterResponse       POST /auth/register  (201)
AuthResponse           POST /auth/verify-email, POST /auth/login  (200)
RefreshResponse        POST /auth/refresh  (200)
DispatchResponse       POST /auth/resend-verification,
                       POST /auth/request-password-reset  (200)
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.models.user import UserDoc
from services.identity_service import DispatchResult
from services.token_service import TokenPair


class UserProfileResponse(BaseModel):
    """Public fields of a user. The password hash never leaves the service."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    name: Optional[str] = None
    username: Optional[str] = None
    mobile_number: Optional[str] = None
    is_email_verified: bool
    is_mobile_verified: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: UserDoc) -> "UserProfileResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            username=user.username,
            mobile_number=user.mobile_number,
            is_email_verified=user.is_email_verified,
            is_mobile_verified=user.is_mobile_verified,
            created_at=user.created_at,
        )


class TokenPairResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str
    access_expires_at: datetime
    refresh_token: str
    refresh_expires_at: datetime
    token_type: str = "bearer"

    @classmethod
    def from_pair(cls, pair: TokenPair) -> "TokenPairResponse":
        return cls(
            access_token=pair.access_token,
            access_expires_at=pair.access_expires_at,
            refresh_token=pair.refresh_token,
            refresh_expires_at=pair.refresh_expires_at,
            token_type=pair.token_type,
        )


class RegisterResponse(BaseModel):
    """Response body for POST /auth/register (201).

    ``email_preview_url`` is only set outside production.
    """

    model_config = ConfigDict(populate_by_name=True)

    user: UserProfileResponse
    requires_verification: bool = True
    verification_sent: bool
    email_dispatch_note: Optional[str] = None
    email_preview_url: Optional[str] = None


class AuthResponse(BaseModel):
    """Response body for POST /auth/login and POST /auth/verify-email (200)."""

    model_config = ConfigDict(populate_by_name=True)

    user: UserProfileResponse
    tokens: TokenPairResponse


class RefreshResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tokens: TokenPairResponse


class DispatchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dispatched: bool
    email_dispatch_note: Optional[str] = None
    email_preview_url: Optional[str] = None

    @classmethod
    def from_result(cls, result: DispatchResult) -> "DispatchResponse":
        return cls(
            dispatched=result.dispatched,
            email_dispatch_note=result.email_dispatch_note,
            email_preview_url=result.email_preview_url,
        )
