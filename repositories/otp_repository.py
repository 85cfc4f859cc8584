"""MongoDB implementation of OneTimeCodeStore over the `otps` collection.

delete_many followed by insert is not wrapped in a transaction: two
concurrent requests for the same (email, purpose) may briefly leave two
codes behind. find_active always picks the newest, so the latest request
wins.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from pymongo import DESCENDING

from repositories.base import BaseRepository
from schemas.models.token import OneTimeCodeDoc


class OneTimeCodeRepository(BaseRepository):
    async def delete_many(self, email: str, purpose: str) -> int:
        with self._translate_errors("delete_many"):
            result = await self._col.delete_many({"email": email, "purpose": purpose})
        return result.deleted_count

    async def insert(self, code: OneTimeCodeDoc) -> OneTimeCodeDoc:
        data = code.to_mongo()
        if data.get("created_at") is None:
            data["created_at"] = datetime.now(timezone.utc)
        with self._translate_errors("insert"):
            result = await self._col.insert_one(data)
        data["_id"] = result.inserted_id
        return OneTimeCodeDoc.from_mongo(data)

    async def find_active(
        self, email: str, purpose: str, now: datetime
    ) -> Optional[OneTimeCodeDoc]:
        with self._translate_errors("find_active"):
            doc = await self._col.find_one(
                {
                    "email": email,
                    "purpose": purpose,
                    "is_used": False,
                    "expires_at": {"$gt": now},
                },
                sort=[("created_at", DESCENDING), ("_id", DESCENDING)],
            )
        return OneTimeCodeDoc.from_mongo(doc)

    async def mark_used(self, code_id: ObjectId) -> bool:
        """Flip is_used on an unused code. Returns False if it was already used."""
        with self._translate_errors("mark_used"):
            result = await self._col.update_one(
                {"_id": code_id, "is_used": False},
                {"$set": {"is_used": True}},
            )
        return result.modified_count == 1
