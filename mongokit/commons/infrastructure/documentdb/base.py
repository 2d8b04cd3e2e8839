"""Abstract base class for typed collection operations."""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class DocumentCollectionBase(ABC, Generic[T]):
    """Abstract base class for a collection holding documents of type ``T``.

    Filters accept an ObjectId hex string, an ObjectId, or a structured
    query expression. Keyword options are forwarded to the driver.
    """

    @abstractmethod
    async def insert_one(self, document: T, **options: Any) -> Any:
        """Insert a document.

        Args:
            document: Document to insert.
            **options: Driver options (e.g. ``session``).

        Returns:
            The document ID, as hex for generated ObjectIds.
        """

    @abstractmethod
    async def insert_many(self, documents: list[T], **options: Any) -> list[Any]:
        """Insert multiple documents.

        Args:
            documents: Documents to insert.
            **options: Driver options (e.g. ``ordered``, ``session``).

        Returns:
            Document IDs in insertion order.

        Raises:
            QueryException: If ``documents`` is empty or the insert fails.
        """

    @abstractmethod
    async def update_one(self, filter_: Any, update: Any, **options: Any) -> None:
        """Update a single document.

        Args:
            filter_: Selection criteria.
            update: Update operators or pipeline.
            **options: Driver options (e.g. ``upsert``, ``session``).

        Raises:
            QueryException: If the call fails or nothing matched.
        """

    @abstractmethod
    async def delete_one(self, filter_: Any, **options: Any) -> None:
        """Delete a single document.

        Args:
            filter_: Selection criteria.
            **options: Driver options (e.g. ``session``).

        Raises:
            QueryException: If the call fails or nothing was deleted.
        """

    @abstractmethod
    async def find_one(self, filter_: Any, **options: Any) -> T:
        """Find a single document.

        Args:
            filter_: Selection criteria.
            **options: Driver options (e.g. ``sort``, ``projection``).

        Returns:
            The decoded document.

        Raises:
            QueryException: If the call fails or nothing matched.
            DecodeException: If the document does not match ``T``.
        """

    @abstractmethod
    async def find(self, filter_: Any, **options: Any) -> list[T]:
        """Find all documents matching a filter.

        Args:
            filter_: Selection criteria.
            **options: Driver options (e.g. ``skip``, ``limit``, ``sort``).

        Returns:
            Decoded documents, possibly empty.
        """

    @abstractmethod
    async def count_documents(self, filter_: Any, **options: Any) -> int:
        """Count documents matching a filter.

        Args:
            filter_: Selection criteria.
            **options: Driver options.

        Returns:
            Number of matching documents.
        """
