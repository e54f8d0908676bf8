"""Errors raised by the local store."""


class StoreError(Exception):
    """Base class for local store errors."""


class StorageUnavailable(StoreError):
    """The embedded database could not be opened."""


class NotInitialized(StoreError):
    """A store operation was called before initialize() completed."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Store not initialized; call initialize() before {operation}()")


class ConstraintViolation(StoreError):
    """A write would break a declared key, NOT NULL or UNIQUE constraint."""
