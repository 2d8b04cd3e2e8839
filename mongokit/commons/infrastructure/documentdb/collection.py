"""Typed MongoDB collection adapter."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from bson import ObjectId
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from mongokit.commons.infrastructure.documentdb.base import DocumentCollectionBase, T
from mongokit.commons.infrastructure.documentdb.filters import (
    normalize_filter,
    object_id,
)
from mongokit.commons.infrastructure.documentdb.session import (
    SessionCallback,
    use_session,
)
from mongokit.commons.telemetry.logger import get_logger
from mongokit.domain.exceptions import (
    DecodeException,
    EncodeException,
    NoDocumentsException,
    QueryException,
)

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorCursor

R = TypeVar("R")

DEFAULT_TIMEOUT_SECONDS = 5.0


def _render_id(value: Any) -> Any:
    """Render generated ObjectIds as hex; external ids pass through."""
    if isinstance(value, ObjectId):
        return str(value)
    return value


class MongoCollection(DocumentCollectionBase[T]):
    """MongoDB implementation of a typed collection.

    Uses Motor for async operations and pydantic to encode and decode
    documents of type ``T``. Every driver call is bounded by ``timeout``
    seconds; on expiry it is cancelled and surfaces as a ``QueryException``
    caused by ``TimeoutError``.
    """

    def __init__(
        self,
        inner: AsyncIOMotorCollection[Any],
        document_type: type[T],
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            inner: Motor collection handle.
            document_type: Pydantic model documents decode into.
            timeout: Per-call timeout in seconds.
            logger: Logger to use. Defaults to this module's logger.
        """
        self.inner = inner
        self.document_type = document_type
        self.timeout = timeout
        self.log = logger or get_logger(__name__)

    @property
    def name(self) -> str:
        return str(self.inner.name)

    async def _execute(self, call: Callable[[], Awaitable[R]]) -> R:
        try:
            async with asyncio.timeout(self.timeout):
                return await call()
        except Exception as e:
            raise QueryException(e) from e

    async def use_session(self, fn: SessionCallback[R]) -> R:
        """Run ``fn`` in a session of this collection's client."""
        return await use_session(self.inner.database.client, fn)

    async def insert_one(self, document: T, **options: Any) -> Any:
        doc = self.to_document(document)

        self.log.debug("Inserting document", extra={"collection": self.name})
        result = await self._execute(lambda: self.inner.insert_one(doc, **options))
        inserted_id = _render_id(result.inserted_id)
        self.log.debug(
            "Document inserted",
            extra={"collection": self.name, "inserted_id": inserted_id},
        )

        return inserted_id

    async def insert_many(self, documents: list[T], **options: Any) -> list[Any]:
        if not documents:
            raise QueryException(ValueError("documents must be a non-empty list"))

        docs = [self.to_document(document) for document in documents]

        self.log.debug(
            "Inserting documents",
            extra={"collection": self.name, "count": len(docs)},
        )
        result = await self._execute(lambda: self.inner.insert_many(docs, **options))
        inserted_ids = [_render_id(id_) for id_ in result.inserted_ids]
        self.log.debug(
            "Documents inserted",
            extra={"collection": self.name, "inserted_ids": inserted_ids},
        )

        return inserted_ids

    async def update_one(self, filter_: Any, update: Any, **options: Any) -> None:
        query = self.normalize_filter(filter_)

        self.log.debug("Updating document", extra={"collection": self.name})
        result = await self._execute(
            lambda: self.inner.update_one(query, update, **options)
        )
        # Counts are unavailable for unacknowledged (w=0) writes
        if (
            result.acknowledged
            and result.matched_count == 0
            and result.modified_count == 0
            and result.upserted_id is None
        ):
            raise QueryException(NoDocumentsException())
        self.log.debug(
            "Document updated",
            extra={"collection": self.name, "result": result.raw_result},
        )

    async def delete_one(self, filter_: Any, **options: Any) -> None:
        query = self.normalize_filter(filter_)

        self.log.debug("Deleting document", extra={"collection": self.name})
        result = await self._execute(lambda: self.inner.delete_one(query, **options))
        if result.acknowledged and result.deleted_count == 0:
            raise QueryException(NoDocumentsException())
        self.log.debug(
            "Document deleted",
            extra={"collection": self.name, "result": result.raw_result},
        )

    async def find_one(self, filter_: Any, **options: Any) -> T:
        query = self.normalize_filter(filter_)

        raw = await self._execute(lambda: self.inner.find_one(query, **options))

        return self.decode(raw)

    async def find(self, filter_: Any, **options: Any) -> list[T]:
        query = self.normalize_filter(filter_)

        try:
            cursor = self.inner.find(query, **options)
        except Exception as e:
            raise QueryException(e) from e

        try:
            async with asyncio.timeout(self.timeout):
                return await self.decode_all(cursor)
        except TimeoutError as e:
            raise QueryException(e) from e

    async def count_documents(self, filter_: Any, **options: Any) -> int:
        query = self.normalize_filter(filter_)

        total = await self._execute(
            lambda: self.inner.count_documents(query, **options)
        )

        return int(total)

    @staticmethod
    def find_options(index: int, size: int) -> dict[str, int]:
        """Pagination options for :meth:`find`.

        Args:
            index: Number of documents to skip.
            size: Page size.
        """
        return {"skip": index, "limit": size}

    def decode(self, raw: Mapping[str, Any] | None) -> T:
        """Decode a single raw document.

        Raises:
            QueryException: If there is no document.
            DecodeException: If the document does not match ``T``.
        """
        if raw is None:
            raise QueryException(NoDocumentsException())
        try:
            return self.document_type.model_validate(raw)
        except ValidationError as e:
            raise DecodeException(e) from e

    async def decode_all(self, cursor: AsyncIOMotorCursor[Any]) -> list[T]:
        """Exhaust a cursor and decode every document.

        Raises:
            QueryException: If fetching from the cursor fails.
            DecodeException: If any document does not match ``T``.
        """
        try:
            raw_documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise QueryException(e) from e

        try:
            return [self.document_type.model_validate(raw) for raw in raw_documents]
        except ValidationError as e:
            raise DecodeException(e) from e

    def normalize_filter(self, filter_: Any) -> Any:
        """See :func:`normalize_filter`."""
        return normalize_filter(filter_)

    def object_id(self, value: str) -> ObjectId:
        """See :func:`object_id`."""
        return object_id(value)

    def to_document(self, document: T) -> dict[str, Any]:
        """Encode a model into a BSON-ready mapping keyed by field alias.

        An unset ``_id`` is dropped so the server generates one.
        """
        try:
            data = document.model_dump(by_alias=True)
        except Exception as e:
            raise EncodeException(e) from e

        if "_id" in data and data["_id"] is None:
            del data["_id"]
        return data
