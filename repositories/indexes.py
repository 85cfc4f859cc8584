"""Collection names and index setup, run once at application startup."""

from __future__ import annotations

from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.asynchronous.database import AsyncDatabase

from shared.logging import get_logger

log = get_logger(__name__)

USERS_COLLECTION = "users"
OTPS_COLLECTION = "otps"
TOKENS_COLLECTION = "tokens"


async def ensure_indexes(db: AsyncDatabase) -> None:
    """Create the unique, lookup and TTL indexes the stores rely on.

    create_indexes is idempotent, so this is safe on every boot.
    """
    await db[USERS_COLLECTION].create_indexes(
        [
            IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
            # Only string usernames take part in uniqueness; absent/null ones don't
            IndexModel(
                [("username", ASCENDING)],
                unique=True,
                partialFilterExpression={"username": {"$type": "string"}},
                name="username_unique",
            ),
        ]
    )
    await db[OTPS_COLLECTION].create_indexes(
        [
            IndexModel(
                [("email", ASCENDING), ("purpose", ASCENDING), ("created_at", DESCENDING)],
                name="email_purpose_created",
            ),
            IndexModel([("expires_at", ASCENDING)], expireAfterSeconds=0, name="expires_ttl"),
        ]
    )
    await db[TOKENS_COLLECTION].create_indexes(
        [
            IndexModel([("token_hash", ASCENDING)], unique=True, name="token_hash_unique"),
            IndexModel([("user_id", ASCENDING)], name="user_id"),
        ]
    )
    log.info("indexes_ensured")
