"""Unit tests for the MongoDB document models."""

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from schemas.models.base import MongoBaseModel, PyObjectId
from schemas.models.token import (
    OTP_PURPOSE_PASSWORD_RESET,
    OTP_PURPOSE_VERIFICATION,
    OneTimeCodeDoc,
    RefreshTokenDoc,
)
from schemas.models.user import UserDoc

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestPyObjectId:
    class _M(MongoBaseModel):
        ref: PyObjectId

    def test_accepts_object_id(self):
        oid = ObjectId()
        assert self._M(ref=oid).ref == oid

    def test_accepts_hex_string(self):
        oid = ObjectId()
        assert self._M(ref=str(oid)).ref == oid

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError):
            self._M(ref="not-an-id")

    def test_serializes_to_string_in_json_mode(self):
        oid = ObjectId()
        assert self._M(ref=oid).model_dump(mode="json")["ref"] == str(oid)


class TestUserDoc:
    def test_defaults(self):
        u = UserDoc(email="a@x.com", password_hash="h")
        assert u.is_email_verified is False
        assert u.is_mobile_verified is False
        assert u.username is None
        assert u.id is None

    def test_to_mongo_drops_missing_id(self):
        data = UserDoc(email="a@x.com", password_hash="h").to_mongo()
        assert "_id" not in data
        assert data["email"] == "a@x.com"

    def test_to_mongo_keeps_object_id_native(self):
        oid = ObjectId()
        data = UserDoc(id=oid, email="a@x.com", password_hash="h").to_mongo()
        assert data["_id"] == oid
        assert isinstance(data["_id"], ObjectId)

    def test_from_mongo_round_trip(self):
        oid = ObjectId()
        u = UserDoc.from_mongo(
            {"_id": oid, "email": "a@x.com", "password_hash": "h", "created_at": NOW}
        )
        assert u.id == oid
        assert u.created_at == NOW

    def test_from_mongo_none(self):
        assert UserDoc.from_mongo(None) is None


class TestOneTimeCodeDoc:
    def test_defaults(self):
        c = OneTimeCodeDoc(email="a@x.com", code_hash="abc", expires_at=NOW)
        assert c.purpose == OTP_PURPOSE_VERIFICATION
        assert c.is_used is False

    def test_password_reset_purpose(self):
        c = OneTimeCodeDoc(
            email="a@x.com", code_hash="abc", purpose=OTP_PURPOSE_PASSWORD_RESET, expires_at=NOW
        )
        assert c.purpose == "passwordReset"

    def test_unknown_purpose_rejected(self):
        with pytest.raises(ValidationError):
            OneTimeCodeDoc(email="a@x.com", code_hash="abc", purpose="login", expires_at=NOW)


class TestRefreshTokenDoc:
    def test_defaults(self):
        t = RefreshTokenDoc(token_hash="abc", user_id=ObjectId(), expires_at=NOW)
        assert t.type == "refresh"
        assert t.blacklisted is False

    def test_user_id_stays_object_id_for_mongo(self):
        uid = ObjectId()
        data = RefreshTokenDoc(token_hash="abc", user_id=uid, expires_at=NOW).to_mongo()
        assert data["user_id"] == uid
