"""MongoDB client and database construction from a connection URI."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError
from pymongo.read_concern import ReadConcern
from pymongo.read_preferences import (
    Nearest,
    Primary,
    PrimaryPreferred,
    Secondary,
    SecondaryPreferred,
)
from pymongo.uri_parser import parse_uri
from pymongo.write_concern import WriteConcern

from mongokit.commons.telemetry.logger import get_logger
from mongokit.domain.exceptions import (
    ConfigurationException,
    ConnectionException,
    DatabaseNameNotFoundException,
)

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorDatabase

    from mongokit.commons.settings.models import DocumentDBSettings

logger = get_logger(__name__)

_SECONDARY_MODES: dict[str, type[Any]] = {
    "primarypreferred": PrimaryPreferred,
    "secondary": Secondary,
    "secondarypreferred": SecondaryPreferred,
    "nearest": Nearest,
}


def _parse(uri: str) -> dict[str, Any]:
    try:
        return dict(parse_uri(uri))
    except (PyMongoError, ValueError) as e:
        raise ConfigurationException(str(e)) from e


def get_database_name(uri: str) -> str:
    """Extract the database name from a connection URI.

    Raises:
        ConfigurationException: If the URI is invalid.
        DatabaseNameNotFoundException: If the URI names no database.
    """
    name = _parse(uri).get("database")
    if not name:
        raise DatabaseNameNotFoundException()
    return str(name)


def database_options(uri: str) -> dict[str, Any]:
    """Build ``get_database`` options from the URI's concern settings.

    Reads ``readConcernLevel``, ``w``/``wTimeoutMS`` and
    ``readPreference``/``maxStalenessSeconds``. Options absent from the URI
    are left out so the database inherits the client's defaults.
    """
    uri_options = _parse(uri)["options"]
    options: dict[str, Any] = {}

    level = uri_options.get("readconcernlevel")
    if level:
        options["read_concern"] = ReadConcern(level)

    w = uri_options.get("w")
    wtimeout = uri_options.get("wtimeoutms")
    if w is not None or wtimeout is not None:
        write_concern: dict[str, Any] = {}
        if w is not None:
            write_concern["w"] = w
        if wtimeout is not None:
            write_concern["wtimeout"] = wtimeout
        options["write_concern"] = WriteConcern(**write_concern)

    mode = uri_options.get("readpreference")
    if mode:
        mode_name = str(mode).lower()
        if mode_name == "primary":
            options["read_preference"] = Primary()
        elif mode_name in _SECONDARY_MODES:
            max_staleness = uri_options.get("maxstalenessseconds", -1)
            options["read_preference"] = _SECONDARY_MODES[mode_name](
                max_staleness=max_staleness
            )
        else:
            raise ConfigurationException(f"unknown read preference: {mode}")

    return options


async def get_client(settings: DocumentDBSettings) -> AsyncIOMotorClient[Any]:
    """Create a Motor client, pinging the server if ``settings.ping`` is set.

    Raises:
        ConnectionException: If the client cannot be created or the ping fails.
    """
    try:
        client: AsyncIOMotorClient[Any] = AsyncIOMotorClient(settings.uri)
    except (PyMongoError, ValueError, TypeError) as e:
        raise ConnectionException(e) from e

    if settings.ping:
        try:
            async with asyncio.timeout(settings.timeout_seconds):
                await client.admin.command("ping")
        except Exception as e:
            client.close()
            raise ConnectionException(e) from e
        logger.info("MongoDB ping succeeded")

    return client


async def get_database(
    settings: DocumentDBSettings,
    client: AsyncIOMotorClient[Any] | None = None,
) -> AsyncIOMotorDatabase[Any]:
    """Open the database named in the connection URI.

    Args:
        settings: Document database settings.
        client: Existing client to reuse. A new one is created if omitted.

    Raises:
        ConfigurationException: If the URI is invalid or names no database.
        ConnectionException: If a new client cannot be created.
    """
    name = get_database_name(settings.uri)
    options = database_options(settings.uri)

    if client is None:
        client = await get_client(settings)

    logger.debug("Opening database", extra={"database": name})
    return client.get_database(name, **options)
