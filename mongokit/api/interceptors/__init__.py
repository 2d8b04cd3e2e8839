"""gRPC server interceptors."""

from mongokit.api.interceptors.error_handler import (
    ErrorHandlerInterceptor,
    RpcStatusError,
    normalize_error,
    wrap_stream_handler,
    wrap_unary_handler,
)
from mongokit.api.interceptors.logging import LoggingInterceptor

__all__ = [
    "ErrorHandlerInterceptor",
    "LoggingInterceptor",
    "RpcStatusError",
    "normalize_error",
    "wrap_stream_handler",
    "wrap_unary_handler",
]
