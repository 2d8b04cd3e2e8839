"""Infrastructure wiring."""

from mongokit.infrastructure.factory import (
    DocumentDBFactory,
    get_factory,
    reset_factory,
)

__all__ = [
    "DocumentDBFactory",
    "get_factory",
    "reset_factory",
]
