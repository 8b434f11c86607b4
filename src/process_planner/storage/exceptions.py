"""Storage-specific exceptions."""


class StorageError(Exception):
    """Base exception for storage operations."""


class StorageInitError(StorageError):
    """The storage directory could not be prepared."""


class DatabaseError(StorageError):
    """Database connection or query failure."""


class MigrationError(StorageError):
    """Schema migration failure."""


class CorruptStoreError(StorageError):
    """A JSON store file could not be decoded."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")
