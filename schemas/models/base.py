"""
Document model base for the users, otps and tokens collections.

Models keep BSON-native values (ObjectId, datetime) in Python mode so a
dump can go straight to pymongo; only JSON dumps stringify ObjectIds.
"""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import core_schema

DocT = TypeVar("DocT", bound="MongoBaseModel")


class PyObjectId(ObjectId):
    """ObjectId field type; accepts an ObjectId or its 24-char hex form."""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )

    @classmethod
    def coerce(cls, value: Any) -> ObjectId:
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        raise ValueError(f"not a valid ObjectId: {value!r}")


class MongoBaseModel(BaseModel):
    """Common base: ``id`` maps to ``_id`` and is None until inserted."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    def to_mongo(self) -> dict:
        """Dump for insert_one; an unset ``_id`` is left for MongoDB to assign."""
        doc = self.model_dump(by_alias=True, mode="python")
        if doc.get("_id") is None:
            doc.pop("_id", None)
        return doc

    @classmethod
    def from_mongo(cls: Type[DocT], doc: Optional[dict]) -> Optional[DocT]:
        """Validate a raw pymongo document; ``None`` in, ``None`` out."""
        return None if doc is None else cls.model_validate(doc)
