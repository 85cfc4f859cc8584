"""
Profile endpoints for the signed-in user (Bearer access token).

GET   /users/me   current profile
PATCH /users/me   update name / username / mobile_number
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_current_user, get_identity_service
from schemas.dto.requests.auth import UpdateProfileRequest
from schemas.dto.responses.auth import UserProfileResponse
from schemas.dto.responses.common import error_responses
from schemas.models.user import UserDoc
from services.identity_service import IdentityService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserProfileResponse, responses=error_responses(401, 404))
async def get_me(
    user: UserDoc = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
) -> UserProfileResponse:
    profile = await identity.get_profile(user.id)
    return UserProfileResponse.from_user(profile)


@router.patch(
    "/me",
    response_model=UserProfileResponse,
    responses=error_responses(400, 401, 404, 409),
)
async def update_me(
    body: UpdateProfileRequest,
    user: UserDoc = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
) -> UserProfileResponse:
    updated = await identity.update_profile(user.id, body.model_dump(exclude_unset=True))
    return UserProfileResponse.from_user(updated)
