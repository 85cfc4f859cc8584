"""Store protocols. Services depend on these, never on the MongoDB repositories.

Each method is a single-document operation (atomic in MongoDB) except
delete_many / blacklist_all_for_user, which are bulk writes.
"""

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol

from bson import ObjectId

from schemas.models.token import OneTimeCodeDoc, RefreshTokenDoc
from schemas.models.user import UserDoc


class UserStore(Protocol):
    async def find_by_email(self, email: str) -> Optional[UserDoc]: ...

    async def find_by_username(self, username: str) -> Optional[UserDoc]: ...

    async def find_by_id(self, user_id: ObjectId) -> Optional[UserDoc]: ...

    async def insert(self, user: UserDoc) -> UserDoc: ...

    async def update(
        self, user_id: ObjectId, fields: Mapping[str, Any]
    ) -> Optional[UserDoc]: ...


class OneTimeCodeStore(Protocol):
    async def delete_many(self, email: str, purpose: str) -> int: ...

    async def insert(self, code: OneTimeCodeDoc) -> OneTimeCodeDoc: ...

    async def find_active(
        self, email: str, purpose: str, now: datetime
    ) -> Optional[OneTimeCodeDoc]: ...

    async def mark_used(self, code_id: ObjectId) -> bool: ...


class RefreshTokenStore(Protocol):
    async def insert(self, token: RefreshTokenDoc) -> RefreshTokenDoc: ...

    async def find_active(
        self, token_hash: str, now: datetime
    ) -> Optional[RefreshTokenDoc]: ...

    async def find_unblacklisted(self, token_hash: str) -> Optional[RefreshTokenDoc]: ...

    async def blacklist(self, token_id: ObjectId) -> bool: ...

    async def blacklist_all_for_user(self, user_id: ObjectId) -> int: ...
