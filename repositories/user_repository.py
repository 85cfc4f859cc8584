"""MongoDB implementation of UserStore over the `users` collection."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from repositories.base import BaseRepository
from schemas.models.user import UserDoc


class UserRepository(BaseRepository):
    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        with self._translate_errors("find_by_email"):
            doc = await self._col.find_one({"email": email})
        return UserDoc.from_mongo(doc)

    async def find_by_username(self, username: str) -> Optional[UserDoc]:
        with self._translate_errors("find_by_username"):
            doc = await self._col.find_one({"username": username})
        return UserDoc.from_mongo(doc)

    async def find_by_id(self, user_id: ObjectId) -> Optional[UserDoc]:
        with self._translate_errors("find_by_id"):
            doc = await self._col.find_one({"_id": user_id})
        return UserDoc.from_mongo(doc)

    async def insert(self, user: UserDoc) -> UserDoc:
        now = datetime.now(timezone.utc)
        data = user.to_mongo()
        if data.get("created_at") is None:
            data["created_at"] = now
        data["updated_at"] = now
        with self._translate_errors("insert"):
            result = await self._col.insert_one(data)
        data["_id"] = result.inserted_id
        return UserDoc.from_mongo(data)

    async def update(
        self, user_id: ObjectId, fields: Mapping[str, Any]
    ) -> Optional[UserDoc]:
        updates = {**fields, "updated_at": datetime.now(timezone.utc)}
        with self._translate_errors("update"):
            doc = await self._col.find_one_and_update(
                {"_id": user_id},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        return UserDoc.from_mongo(doc)
