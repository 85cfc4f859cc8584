"""
Authentication endpoints.

POST /auth/register                 create an unverified account (201)
POST /auth/verify-email             consume the verification code, sign in
POST /auth/resend-verification      mail a fresh verification code
POST /auth/login                    email + password sign in
POST /auth/refresh                  rotate a refresh token
POST /auth/logout                   blacklist a refresh token
POST /auth/request-password-reset   mail a password reset code
POST /auth/reset-password           set a new password with the code

Handlers only translate between DTOs and IdentityService; every rule and
every error lives in the service.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_identity_service
from schemas.dto.requests.auth import (
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    RequestPasswordResetRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    VerifyEmailRequest,
)
from schemas.dto.responses.auth import (
    AuthResponse,
    DispatchResponse,
    RefreshResponse,
    RegisterResponse,
    TokenPairResponse,
    UserProfileResponse,
)
from schemas.dto.responses.common import MessageResponse, error_responses
from services.identity_service import AuthResult, IdentityService

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=UserProfileResponse.from_user(result.user),
        tokens=TokenPairResponse.from_pair(result.tokens),
    )


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses=error_responses(400, 409),
)
async def register(
    body: RegisterRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> RegisterResponse:
    result = await identity.register(
        body.email,
        body.password,
        name=body.name,
        username=body.username,
        mobile_number=body.mobile_number,
    )
    return RegisterResponse(
        user=UserProfileResponse.from_user(result.user),
        requires_verification=True,
        verification_sent=result.email_sent,
        email_dispatch_note=result.email_dispatch_note,
        email_preview_url=result.email_preview_url,
    )


@router.post("/verify-email", response_model=AuthResponse, responses=error_responses(400, 404))
async def verify_email(
    body: VerifyEmailRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> AuthResponse:
    return _auth_response(await identity.verify_email(body.email, body.code))


@router.post(
    "/resend-verification",
    response_model=DispatchResponse,
    responses=error_responses(400, 404),
)
async def resend_verification(
    body: ResendVerificationRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> DispatchResponse:
    result = await identity.resend_verification(body.email)
    return DispatchResponse.from_result(result)


@router.post("/login", response_model=AuthResponse, responses=error_responses(401, 403))
async def login(
    body: LoginRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> AuthResponse:
    return _auth_response(await identity.login(body.email, body.password))


@router.post("/refresh", response_model=RefreshResponse, responses=error_responses(401))
async def refresh(
    body: RefreshTokenRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> RefreshResponse:
    pair = await identity.refresh(body.refresh_token)
    return RefreshResponse(tokens=TokenPairResponse.from_pair(pair))


@router.post("/logout", response_model=MessageResponse, responses=error_responses(400))
async def logout(
    body: RefreshTokenRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> MessageResponse:
    await identity.logout(body.refresh_token)
    return MessageResponse(message="Logged out")


@router.post(
    "/request-password-reset",
    response_model=DispatchResponse,
    responses=error_responses(404),
)
async def request_password_reset(
    body: RequestPasswordResetRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> DispatchResponse:
    result = await identity.request_password_reset(body.email)
    return DispatchResponse.from_result(result)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses=error_responses(400, 404),
)
async def reset_password(
    body: ResetPasswordRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> MessageResponse:
    await identity.reset_password(body.email, body.code, body.new_password)
    return MessageResponse(message="Password has been reset")
