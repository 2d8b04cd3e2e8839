"""Call logging interceptor."""

from __future__ import annotations

import inspect
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any

import grpc

from mongokit.commons.telemetry.logger import (
    clear_log_context,
    get_logger,
    set_correlation_id,
    set_log_context,
)

logger = get_logger(__name__)

REQUEST_ID_KEY = "x-request-id"


def _request_id(handler_call_details: grpc.HandlerCallDetails) -> str | None:
    for key, value in handler_call_details.invocation_metadata or ():
        if key == REQUEST_ID_KEY:
            return value if isinstance(value, str) else value.decode()
    return None


@contextmanager
def _call_logged(method: str, request_id: str | None) -> Iterator[None]:
    cid = set_correlation_id(request_id)
    clear_log_context()
    set_log_context(rpc_method=method)

    start_time = time.perf_counter()
    logger.info("Call started", extra={"rpc_method": method, "request_id": cid})
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Call completed",
            extra={
                "rpc_method": method,
                "request_id": cid,
                "duration_ms": round(duration_ms, 2),
            },
        )


def _logged(behavior: Callable[..., Any], method: str, request_id: str | None) -> Any:
    if not inspect.iscoroutinefunction(behavior):

        def sync_wrapper(request: Any, context: Any) -> Any:
            with _call_logged(method, request_id):
                return behavior(request, context)

        return sync_wrapper

    async def wrapper(request: Any, context: grpc.aio.ServicerContext) -> Any:
        with _call_logged(method, request_id):
            return await behavior(request, context)

    return wrapper


class LoggingInterceptor(grpc.aio.ServerInterceptor):
    """Binds a correlation ID to each call and logs its duration.

    The ID is read from the ``x-request-id`` metadata key, or generated.
    Only single-response calls are timed; streaming calls pass through.
    """

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

        method = handler_call_details.method
        request_id = _request_id(handler_call_details)

        if handler.unary_unary:
            return grpc.unary_unary_rpc_method_handler(
                _logged(handler.unary_unary, method, request_id),
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        if handler.stream_unary:
            return grpc.stream_unary_rpc_method_handler(
                _logged(handler.stream_unary, method, request_id),
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        return handler
