"""
One-time code and refresh token document models.

OneTimeCodeDoc maps to the `otps` collection. Used for both email
verification and password reset codes. code_hash stores SHA-256(code);
the plain code is never stored. A TTL index on expires_at lets MongoDB
remove codes once they lapse.

RefreshTokenDoc maps to the `tokens` collection. token_hash stores
SHA-256(refresh JWT). The stored record, not the JWT signature, decides
whether a refresh token is still alive: blacklisted records stay in place
so reuse can be rejected.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from schemas.models.base import MongoBaseModel, PyObjectId


OTP_PURPOSE_VERIFICATION = "verification"
OTP_PURPOSE_PASSWORD_RESET = "passwordReset"

OTPPurpose = Literal["verification", "passwordReset"]

TOKEN_TYPE_REFRESH = "refresh"


class OneTimeCodeDoc(MongoBaseModel):
    """Document model for the `otps` collection."""

    email: str
    code_hash: str
    purpose: OTPPurpose = OTP_PURPOSE_VERIFICATION
    expires_at: datetime
    is_used: bool = False
    created_at: Optional[datetime] = None


class RefreshTokenDoc(MongoBaseModel):
    """Document model for the `tokens` collection."""

    token_hash: str
    user_id: PyObjectId
    type: Literal["refresh"] = TOKEN_TYPE_REFRESH
    expires_at: datetime
    blacklisted: bool = False
    created_at: Optional[datetime] = None
