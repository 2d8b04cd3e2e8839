"""Domain models."""

from mongokit.domain.models.document import Document, DocumentId

__all__ = [
    "Document",
    "DocumentId",
]
