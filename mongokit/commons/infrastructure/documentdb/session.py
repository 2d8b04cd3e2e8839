"""Session and transaction helpers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from pymongo.client_session import TransactionOptions
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from mongokit.commons.telemetry.logger import get_logger
from mongokit.domain.exceptions import TransactionAbortException

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession

R = TypeVar("R")

SessionCallback = Callable[["AsyncIOMotorClientSession"], Awaitable[R]]

logger = get_logger(__name__)


def default_transaction_options() -> TransactionOptions:
    """Majority write concern with snapshot reads."""
    return TransactionOptions(
        read_concern=ReadConcern("snapshot"),
        write_concern=WriteConcern(w="majority"),
    )


def session_in_transaction(session: Any) -> bool:
    """Return whether the session has an active transaction.

    Motor exposes ``in_transaction`` as a property; test doubles may use a
    method.
    """
    in_txn = getattr(session, "in_transaction", False)
    return bool(in_txn() if callable(in_txn) else in_txn)


async def use_session(
    client: AsyncIOMotorClient[Any],
    fn: SessionCallback[R],
) -> R:
    """Run ``fn`` inside a client session.

    The session is always ended. If ``fn`` raises while a transaction is
    active, the transaction is aborted before the error propagates.

    Args:
        client: Motor client to start the session on.
        fn: Coroutine function receiving the session.

    Returns:
        Whatever ``fn`` returns.

    Raises:
        TransactionAbortException: If the abort itself fails.
    """
    session = await client.start_session()
    try:
        return await fn(session)
    except Exception as e:
        if session_in_transaction(session):
            logger.warning(
                "Aborting transaction after error",
                extra={"error": str(e), "exception_type": type(e).__name__},
            )
            try:
                await session.abort_transaction()
            except Exception as abort_error:
                logger.critical(
                    "Failed to abort transaction",
                    exc_info=True,
                    extra={"error": str(e)},
                )
                raise TransactionAbortException(e, abort_error) from abort_error
        raise
    finally:
        await session.end_session()


async def use_transaction(
    client: AsyncIOMotorClient[Any],
    fn: SessionCallback[R],
    options: TransactionOptions | None = None,
) -> R:
    """Run ``fn`` inside a transaction and commit it.

    Args:
        client: Motor client to start the session on.
        fn: Coroutine function receiving the session.
        options: Transaction options. Defaults to
            :func:`default_transaction_options`.

    Returns:
        Whatever ``fn`` returns.
    """
    txn_options = options or default_transaction_options()

    async def run(session: AsyncIOMotorClientSession) -> R:
        session.start_transaction(
            read_concern=txn_options.read_concern,
            write_concern=txn_options.write_concern,
            read_preference=txn_options.read_preference,
            max_commit_time_ms=txn_options.max_commit_time_ms,
        )
        result = await fn(session)
        await session.commit_transaction()
        return result

    return await use_session(client, run)
