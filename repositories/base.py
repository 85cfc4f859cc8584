"""Shared plumbing for the MongoDB repositories.

BaseRepository wraps an async pymongo collection and translates driver
exceptions, BSON string encoding failures included, into the AppError
taxonomy so no raw driver error leaves the data layer.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from bson.errors import InvalidStringData
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import ConflictError, InternalError, ValidationError
from shared.logging import get_logger

log = get_logger(__name__)


class BaseRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    @contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except DuplicateKeyError as e:
            log.warning(
                "db_duplicate_key",
                collection=self._col.name,
                operation=operation,
                fields=list((e.details or {}).get("keyPattern", {})),
            )
            raise ConflictError("Resource already exists") from e
        except InvalidStringData as e:
            log.warning("db_invalid_string", collection=self._col.name, operation=operation)
            raise ValidationError("Input contains characters that cannot be stored") from e
        except PyMongoError as e:
            log.error(
                "db_operation_failed",
                collection=self._col.name,
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise InternalError("A storage error occurred") from e
