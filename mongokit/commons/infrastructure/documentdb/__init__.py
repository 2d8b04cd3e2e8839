"""Document database helpers built on Motor."""

from mongokit.commons.infrastructure.documentdb.base import DocumentCollectionBase
from mongokit.commons.infrastructure.documentdb.client import (
    database_options,
    get_client,
    get_database,
    get_database_name,
)
from mongokit.commons.infrastructure.documentdb.collection import (
    DEFAULT_TIMEOUT_SECONDS,
    MongoCollection,
)
from mongokit.commons.infrastructure.documentdb.filters import (
    normalize_filter,
    object_id,
)
from mongokit.commons.infrastructure.documentdb.session import (
    default_transaction_options,
    use_session,
    use_transaction,
)

__all__ = [
    # Base classes
    "DocumentCollectionBase",
    # Implementations
    "MongoCollection",
    "DEFAULT_TIMEOUT_SECONDS",
    # Connection
    "get_client",
    "get_database",
    "get_database_name",
    "database_options",
    # Filters
    "normalize_filter",
    "object_id",
    # Sessions
    "default_transaction_options",
    "use_session",
    "use_transaction",
]
