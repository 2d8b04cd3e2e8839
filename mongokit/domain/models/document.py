"""Base model for documents stored through the collection adapter."""

from typing import Annotated

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer


def _render_id(value: ObjectId | str) -> str:
    return str(value)


# ObjectIds stay ObjectIds so documents round-trip through the driver
# unchanged; JSON output renders them as hex.
DocumentId = Annotated[
    ObjectId | str,
    PlainSerializer(_render_id, return_type=str, when_used="json"),
]


class Document(BaseModel):
    """Base class for collection documents.

    The ``id`` field maps to MongoDB's ``_id``. Leave it unset to let the
    server generate an ObjectId on insert. String ids are stored as given,
    so a hex string is not an ObjectId: pass ``ObjectId(hex)`` to address
    a server-generated id.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: DocumentId | None = Field(
        default=None,
        alias="_id",
        description="Document identifier (ObjectId or external string)",
    )
