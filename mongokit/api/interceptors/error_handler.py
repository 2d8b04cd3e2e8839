"""Error normalization for gRPC servers."""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from typing import Any

import grpc
from pymongo.errors import (
    BulkWriteError,
    DuplicateKeyError,
    OperationFailure,
    PyMongoError,
)

from mongokit.commons.telemetry.logger import get_logger
from mongokit.domain.exceptions import NoDocumentsException

logger = get_logger(__name__)

_DUPLICATE_KEY_CODES = frozenset({11000, 11001, 12582})
_LEGACY_COMMAND_ERROR_CODE = 16460

Behavior = Callable[..., Any]


class RpcStatusError(Exception):
    """An error carrying the gRPC status it should be reported with."""

    def __init__(self, code: grpc.StatusCode, details: str = "") -> None:
        """Initialize status error.

        Args:
            code: gRPC status code.
            details: Human-readable details sent to the client.
        """
        self.code = code
        self.details = details
        super().__init__(details)

    def __repr__(self) -> str:
        return f"RpcStatusError({self.code.name}, {self.details!r})"


def _is_status_error(err: BaseException) -> bool:
    if isinstance(err, RpcStatusError | grpc.aio.AbortError):
        return True
    return isinstance(err, grpc.RpcError) and callable(getattr(err, "code", None))


def _next_cause(err: BaseException) -> BaseException | None:
    if err.__cause__ is not None:
        return err.__cause__
    # Wrapping exceptions keep what they wrap even when raised without ``from``
    wrapped = getattr(err, "cause", None)
    if isinstance(wrapped, BaseException):
        return wrapped
    if err.__suppress_context__:
        return None
    return err.__context__


def _causes(err: BaseException) -> Iterator[BaseException]:
    """Walk an exception and everything it was raised from."""
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = _next_cause(current)


def _is_not_found(err: BaseException) -> bool:
    return isinstance(err, NoDocumentsException)


def _is_duplicate_key(err: BaseException) -> bool:
    if isinstance(err, DuplicateKeyError):
        return True
    if isinstance(err, BulkWriteError):
        write_errors = (err.details or {}).get("writeErrors", [])
        return any(e.get("code") in _DUPLICATE_KEY_CODES for e in write_errors)
    if isinstance(err, OperationFailure):
        if err.code in _DUPLICATE_KEY_CODES:
            return True
        return err.code == _LEGACY_COMMAND_ERROR_CODE and "E11000" in str(err)
    return False


def _is_timeout(err: BaseException) -> bool:
    if isinstance(err, TimeoutError):
        return True
    return isinstance(err, PyMongoError) and bool(err.timeout)


_CLASSIFIERS: tuple[tuple[Callable[[BaseException], bool], grpc.StatusCode], ...] = (
    (_is_not_found, grpc.StatusCode.NOT_FOUND),
    (_is_duplicate_key, grpc.StatusCode.ALREADY_EXISTS),
    (_is_timeout, grpc.StatusCode.DEADLINE_EXCEEDED),
)


def normalize_error(err: BaseException | None) -> BaseException | None:
    """Classify an error into a gRPC status.

    Errors that already carry a status are returned unchanged. Otherwise
    the whole cause chain is searched for, in order, a missing document,
    a duplicate key and a timeout; anything else is ``INTERNAL``. The
    original message becomes the status details.

    Args:
        err: Error raised by a handler, or None.

    Returns:
        None, the original status-coded error, or an ``RpcStatusError``.
    """
    if err is None:
        return None
    if _is_status_error(err):
        return err

    for matches, code in _CLASSIFIERS:
        if any(matches(cause) for cause in _causes(err)):
            return RpcStatusError(code, str(err))

    return RpcStatusError(grpc.StatusCode.INTERNAL, str(err))


def _status_of(err: Exception) -> tuple[grpc.StatusCode, str]:
    status = normalize_error(err)

    if isinstance(status, RpcStatusError):
        code, details = status.code, status.details
    elif isinstance(status, grpc.RpcError):
        code, details = status.code(), status.details()
    else:
        # Already aborted through the context
        raise err

    if code == grpc.StatusCode.INTERNAL and status is not err:
        logger.error("Unhandled error in RPC handler", exc_info=err)
    else:
        logger.warning(
            f"RPC failed with {code.name}",
            extra={"status_code": code.name, "error_message": details},
        )
    return code, details


async def _abort(context: grpc.aio.ServicerContext, err: Exception) -> None:
    code, details = _status_of(err)
    await context.abort(code, details)


def _abort_sync(context: Any, err: Exception) -> None:
    code, details = _status_of(err)
    context.abort(code, details)
    # The thread-pool context reports the abort instead of raising it
    raise grpc.aio.AbortError()


def wrap_unary_handler(behavior: Behavior) -> Behavior:
    """Wrap a single-response behavior with error normalization.

    Plain functions stay plain so grpc.aio still runs them in its thread
    pool with a synchronous context.
    """
    if not inspect.iscoroutinefunction(behavior):

        def sync_wrapper(request: Any, context: Any) -> Any:
            try:
                return behavior(request, context)
            except Exception as e:
                _abort_sync(context, e)

        return sync_wrapper

    async def wrapper(request: Any, context: grpc.aio.ServicerContext) -> Any:
        try:
            return await behavior(request, context)
        except Exception as e:
            await _abort(context, e)

    return wrapper


def wrap_stream_handler(behavior: Behavior) -> Behavior:
    """Wrap a response-streaming behavior with error normalization.

    Handles async generators, coroutines that write to the context and
    plain generator functions.
    """
    if inspect.iscoroutinefunction(behavior):
        return wrap_unary_handler(behavior)

    if not inspect.isasyncgenfunction(behavior):

        def sync_wrapper(request: Any, context: Any) -> Iterator[Any]:
            try:
                yield from behavior(request, context)
            except Exception as e:
                _abort_sync(context, e)

        return sync_wrapper

    async def wrapper(
        request: Any, context: grpc.aio.ServicerContext
    ) -> AsyncIterator[Any]:
        try:
            async for response in behavior(request, context):
                yield response
        except Exception as e:
            await _abort(context, e)

    return wrapper


class ErrorHandlerInterceptor(grpc.aio.ServerInterceptor):
    """Server interceptor that reports handler errors as gRPC statuses."""

    async def intercept_service(
        self,
        continuation: Callable[
            [grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler | None]
        ],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler | None:
        handler = await continuation(handler_call_details)
        if handler is None:
            return None

        if handler.unary_unary:
            return grpc.unary_unary_rpc_method_handler(
                wrap_unary_handler(handler.unary_unary),
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        if handler.unary_stream:
            return grpc.unary_stream_rpc_method_handler(
                wrap_stream_handler(handler.unary_stream),
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        if handler.stream_unary:
            return grpc.stream_unary_rpc_method_handler(
                wrap_unary_handler(handler.stream_unary),
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        if handler.stream_stream:
            return grpc.stream_stream_rpc_method_handler(
                wrap_stream_handler(handler.stream_stream),
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        return handler
