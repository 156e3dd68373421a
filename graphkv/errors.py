"""Error kinds raised by graphkv."""
from __future__ import annotations


class GraphKVError(Exception):
    """Base class for every error raised by the package."""


class ValidationError(GraphKVError, ValueError):
    """Malformed statement text, out-of-range configuration or bad input."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class NotFoundError(GraphKVError, LookupError):
    """A referenced source, node or identifier mapping does not exist."""


class StoreError(GraphKVError, RuntimeError):
    """The backing key-value store failed to execute an operation."""


__all__ = ["GraphKVError", "NotFoundError", "StoreError", "ValidationError"]
