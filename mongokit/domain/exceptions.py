"""Exceptions raised by the document database layer."""

from typing import Any


class DocumentDBException(Exception):
    """Base exception for document database errors."""


class ConfigurationException(DocumentDBException):
    """Raised when the connection URI cannot be used."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"invalid mongodb configuration: {reason}")


class DatabaseNameNotFoundException(ConfigurationException):
    """Raised when the connection URI does not name a database."""

    def __init__(self) -> None:
        super().__init__("database name not found in URI")


class ConnectionException(DocumentDBException):
    """Raised when a client cannot be created or does not answer a ping."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"failed to create mongodb client due to error: {cause}")


class NoDocumentsException(DocumentDBException):
    """Raised when a query or write matched no documents."""

    def __init__(self) -> None:
        super().__init__("no documents in result")


class QueryException(DocumentDBException):
    """Raised when a driver call fails or affects nothing."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"failed to execute query due to error: {cause}")


class DecodeException(DocumentDBException):
    """Raised when a stored document does not match the expected model."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"failed to decode document due to error: {cause}")


class EncodeException(DocumentDBException):
    """Raised when a model cannot be turned into a BSON-ready mapping."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"failed to marshal document due to error: {cause}")


class ObjectIdException(DocumentDBException):
    """Raised when a hex string is not a valid ObjectId."""

    def __init__(self, value: str, cause: BaseException) -> None:
        self.value = value
        self.cause = cause
        super().__init__(f"failed to convert hex to ObjectId due to error: {cause}")


class FilterNormalizationException(DocumentDBException):
    """Raised when a filter has a shape the driver does not accept."""

    def __init__(self, value: Any) -> None:
        self.filter_type = type(value).__name__
        super().__init__("couldn't normalize filter")


class TransactionAbortException(DocumentDBException):
    """Raised when a failed transaction could not be aborted.

    The session may have left partial writes behind, so callers must not
    treat this like an ordinary query failure.
    """

    def __init__(self, error: BaseException, abort_error: BaseException) -> None:
        self.error = error
        self.abort_error = abort_error
        super().__init__(
            f"failed to abort transaction after error: {error}: {abort_error}"
        )
