"""Typed MongoDB collection helpers and gRPC error normalization."""

__version__ = "0.1.0"
