"""
User document model.

Maps to the `users` MongoDB collection.

email is stored trimmed and lowercased; username likewise when present.
password_hash holds an argon2id hash; the plaintext password is never
stored. Registration creates the document unverified; only OTP
verification flips is_email_verified.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    email: str
    password_hash: str
    name: Optional[str] = None
    username: Optional[str] = None
    mobile_number: Optional[str] = None
    is_email_verified: bool = False
    is_mobile_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
