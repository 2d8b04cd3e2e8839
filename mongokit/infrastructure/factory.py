"""Factory for building MongoDB handles and typed collections from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar, cast

from pydantic import BaseModel

from mongokit.commons.infrastructure.documentdb import (
    MongoCollection,
    get_client,
    get_database,
)
from mongokit.commons.settings import Settings, get_settings
from mongokit.commons.telemetry.logger import get_logger

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

T = TypeVar("T", bound=BaseModel)

logger = get_logger(__name__)


class DocumentDBFactory:
    """Factory for document database instances.

    The client, the database and each collection adapter are created once
    and reused for the lifetime of the factory.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._client: AsyncIOMotorClient[Any] | None = None
        self._database: AsyncIOMotorDatabase[Any] | None = None
        self._collections: dict[str, MongoCollection[Any]] = {}

    async def get_client(self) -> AsyncIOMotorClient[Any]:
        """Get the shared Motor client."""
        if self._client is None:
            self._client = await get_client(self._settings.document_db)
        return self._client

    async def get_database(self) -> AsyncIOMotorDatabase[Any]:
        """Get the database named in the connection URI."""
        if self._database is None:
            client = await self.get_client()
            self._database = await get_database(
                self._settings.document_db, client=client
            )
        return self._database

    async def get_collection(
        self,
        name: str,
        document_type: type[T],
    ) -> MongoCollection[T]:
        """Get the typed adapter for a collection.

        Args:
            name: Collection name.
            document_type: Model documents decode into.

        Returns:
            Collection adapter, shared per name.

        Raises:
            TypeError: If the collection was already built for another model.
        """
        existing = self._collections.get(name)
        if existing is not None:
            if existing.document_type is not document_type:
                raise TypeError(
                    f"Collection '{name}' is bound to "
                    f"{existing.document_type.__name__}, "
                    f"not {document_type.__name__}"
                )
            return cast("MongoCollection[T]", existing)

        database = await self.get_database()
        collection = MongoCollection(
            database[name],
            document_type,
            timeout=self._settings.document_db.timeout_seconds,
        )
        self._collections[name] = collection
        return collection

    def close(self) -> None:
        """Close the client and forget cached handles."""
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB client closed")
        self._client = None
        self._database = None
        self._collections.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: DocumentDBFactory | None = None


def get_factory(settings: Settings | None = None) -> DocumentDBFactory:
    """Get or create the factory singleton.

    Args:
        settings: Settings to use on first call. Defaults to
            :func:`get_settings`, which fails fast on a bad connection URI.
    """
    if _FactoryHolder.instance is None:
        _FactoryHolder.instance = DocumentDBFactory(settings or get_settings())

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
