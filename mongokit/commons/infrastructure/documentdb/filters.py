"""Filter normalization for collection queries."""

from collections.abc import Mapping
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from mongokit.commons.telemetry.logger import get_logger
from mongokit.domain.exceptions import (
    FilterNormalizationException,
    ObjectIdException,
)

logger = get_logger(__name__)

FIELD_PAIR_LENGTH = 2


def object_id(value: str) -> ObjectId:
    """Parse a 24 character hex string into an ObjectId.

    Raises:
        ObjectIdException: If the string is not a valid ObjectId.
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise ObjectIdException(value, e) from e


def _is_field_pair(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == FIELD_PAIR_LENGTH
        and isinstance(value[0], str)
    )


def _is_expression(value: Any) -> bool:
    if isinstance(value, Mapping) or _is_field_pair(value):
        return True
    if isinstance(value, list):
        return all(
            isinstance(item, Mapping) or _is_field_pair(item) for item in value
        )
    return False


def normalize_filter(value: Any) -> Any:
    """Turn a filter argument into something the driver accepts.

    Hex strings and ObjectIds select by ``_id``. Mappings, ordered lists of
    ``(field, value)`` pairs, single pairs and lists of mappings are returned
    unchanged.

    Args:
        value: Filter argument supplied by the caller.

    Returns:
        The structured filter.

    Raises:
        ObjectIdException: If a string is not a valid ObjectId hex.
        FilterNormalizationException: If the shape is not supported.
    """
    logger.debug("Normalizing filter", extra={"filter_type": type(value).__name__})

    if isinstance(value, str):
        value = object_id(value)
    if isinstance(value, ObjectId):
        return {"_id": value}

    if _is_expression(value):
        return value

    raise FilterNormalizationException(value)
