"""
Request DTOs for the identity endpoints.

RegisterRequest               POST /auth/register
VerifyEmailRequest            POST /auth/verify-email
ResendVerificationRequest     POST /auth/resend-verification
LoginRequest                  POST /auth/login
RefreshTokenRequest           POST /auth/refresh, POST /auth/logout
RequestPasswordResetRequest   POST /auth/request-password-reset
ResetPasswordRequest          POST /auth/reset-password
UpdateProfileRequest          PATCH /users/me

Field-level rules (email grammar, password length, mobile pattern) are
enforced by IdentityService so every caller gets the same errors; these
models only fix the shape. Camel-case aliases are accepted for clients
of the older API.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    name: Optional[str] = None
    username: Optional[str] = None
    mobile_number: Optional[str] = Field(default=None, alias="mobileNumber")


class VerifyEmailRequest(BaseModel):
    """Request body for POST /auth/verify-email.

    ``code`` is the 6-digit code mailed to ``email``.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str
    code: str = Field(alias="otp")


class ResendVerificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str


class RefreshTokenRequest(BaseModel):
    """Request body for POST /auth/refresh and POST /auth/logout."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(alias="refreshToken")


class RequestPasswordResetRequest(BaseModel):
    """Request body for POST /auth/request-password-reset."""

    model_config = ConfigDict(populate_by_name=True)

    email: str


class ResetPasswordRequest(BaseModel):
    """Request body for POST /auth/reset-password."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    code: str = Field(alias="otp")
    new_password: str = Field(alias="newPassword")


class UpdateProfileRequest(BaseModel):
    """Request body for PATCH /users/me.

    Unknown keys (email, password, verification flags) are dropped by
    pydantic and never reach the service. Only keys the client actually
    sent are applied; see ``model_dump(exclude_unset=True)`` in the route.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    username: Optional[str] = None
    mobile_number: Optional[str] = Field(default=None, alias="mobileNumber")
