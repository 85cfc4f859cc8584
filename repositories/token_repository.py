"""MongoDB implementation of RefreshTokenStore over the `tokens` collection."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId

from repositories.base import BaseRepository
from schemas.models.token import TOKEN_TYPE_REFRESH, RefreshTokenDoc


class RefreshTokenRepository(BaseRepository):
    async def insert(self, token: RefreshTokenDoc) -> RefreshTokenDoc:
        data = token.to_mongo()
        if data.get("created_at") is None:
            data["created_at"] = datetime.now(timezone.utc)
        with self._translate_errors("insert"):
            result = await self._col.insert_one(data)
        data["_id"] = result.inserted_id
        return RefreshTokenDoc.from_mongo(data)

    async def find_active(
        self, token_hash: str, now: datetime
    ) -> Optional[RefreshTokenDoc]:
        with self._translate_errors("find_active"):
            doc = await self._col.find_one(
                {
                    "token_hash": token_hash,
                    "type": TOKEN_TYPE_REFRESH,
                    "blacklisted": False,
                    "expires_at": {"$gt": now},
                }
            )
        return RefreshTokenDoc.from_mongo(doc)

    async def find_unblacklisted(self, token_hash: str) -> Optional[RefreshTokenDoc]:
        with self._translate_errors("find_unblacklisted"):
            doc = await self._col.find_one(
                {
                    "token_hash": token_hash,
                    "type": TOKEN_TYPE_REFRESH,
                    "blacklisted": False,
                }
            )
        return RefreshTokenDoc.from_mongo(doc)

    async def blacklist(self, token_id: ObjectId) -> bool:
        """Blacklist a live token. Returns False if another request got there first."""
        with self._translate_errors("blacklist"):
            result = await self._col.update_one(
                {"_id": token_id, "blacklisted": False},
                {"$set": {"blacklisted": True}},
            )
        return result.modified_count == 1

    async def blacklist_all_for_user(self, user_id: ObjectId) -> int:
        with self._translate_errors("blacklist_all_for_user"):
            result = await self._col.update_many(
                {"user_id": user_id, "blacklisted": False},
                {"$set": {"blacklisted": True}},
            )
        return result.modified_count
