"""
Storage-specific exceptions.

These exceptions provide detailed error handling for storage operations.
Transport and filesystem errors that are not listed here propagate unchanged.
"""


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class IntegrityError(StorageError):
    """Raised when the backend rejects an upload because its checksum does not match."""

    def __init__(self, key: str, checksum: str | None = None):
        self.key = key
        self.checksum = checksum
        super().__init__(f"Checksum verification failed for blob: {key}")


class BlobNotFoundError(StorageError):
    """Raised when a blob to be downloaded is not stored under the given key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Blob not found: {key}")
