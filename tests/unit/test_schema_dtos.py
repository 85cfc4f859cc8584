"""Unit tests for the request/response DTOs."""

from datetime import datetime, timezone

from bson import ObjectId

from schemas.dto.requests.auth import (
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
    VerifyEmailRequest,
)
from schemas.dto.responses.auth import TokenPairResponse, UserProfileResponse
from schemas.dto.responses.common import ErrorResponse, MessageResponse, error_responses
from schemas.models.user import UserDoc
from services.token_service import TokenPair

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestRequests:
    def test_register_accepts_camel_case_mobile(self):
        r = RegisterRequest.model_validate(
            {"email": "a@x.com", "password": "secret1", "mobileNumber": "9876543210"}
        )
        assert r.mobile_number == "9876543210"

    def test_register_accepts_snake_case_mobile(self):
        r = RegisterRequest.model_validate(
            {"email": "a@x.com", "password": "secret1", "mobile_number": "9876543210"}
        )
        assert r.mobile_number == "9876543210"

    def test_verify_accepts_otp_alias(self):
        assert VerifyEmailRequest.model_validate({"email": "a@x.com", "otp": "123456"}).code == "123456"
        assert VerifyEmailRequest.model_validate({"email": "a@x.com", "code": "123456"}).code == "123456"

    def test_refresh_token_aliases(self):
        assert RefreshTokenRequest.model_validate({"refreshToken": "t"}).refresh_token == "t"
        assert RefreshTokenRequest.model_validate({"refresh_token": "t"}).refresh_token == "t"

    def test_reset_password_aliases(self):
        r = ResetPasswordRequest.model_validate(
            {"email": "a@x.com", "otp": "123456", "newPassword": "secret2"}
        )
        assert (r.code, r.new_password) == ("123456", "secret2")


class TestUpdateProfileRequest:
    def test_unknown_fields_dropped(self):
        r = UpdateProfileRequest.model_validate(
            {"name": "A", "email": "evil@x.com", "is_email_verified": True}
        )
        dumped = r.model_dump(exclude_unset=True)
        assert dumped == {"name": "A"}

    def test_only_sent_fields_are_set(self):
        r = UpdateProfileRequest.model_validate({"mobileNumber": "9876543210"})
        assert r.model_dump(exclude_unset=True) == {"mobile_number": "9876543210"}

    def test_explicit_null_is_kept(self):
        r = UpdateProfileRequest.model_validate({"username": None})
        assert r.model_dump(exclude_unset=True) == {"username": None}


class TestResponses:
    def test_profile_hides_password_hash(self):
        user = UserDoc(id=ObjectId(), email="a@x.com", password_hash="secret-hash", created_at=NOW)
        dumped = UserProfileResponse.from_user(user).model_dump()
        assert "password_hash" not in dumped
        assert dumped["id"] == str(user.id)
        assert dumped["is_email_verified"] is False

    def test_token_pair(self):
        pair = TokenPair(
            access_token="a",
            access_expires_at=NOW,
            refresh_token="r",
            refresh_expires_at=NOW,
        )
        resp = TokenPairResponse.from_pair(pair)
        assert resp.token_type == "bearer"
        assert resp.refresh_token == "r"

    def test_message_defaults_to_success(self):
        assert MessageResponse(message="Logged out").model_dump() == {
            "success": True,
            "message": "Logged out",
        }

    def test_error_responses_document_each_status(self):
        assert error_responses(400, 409) == {
            400: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        }
