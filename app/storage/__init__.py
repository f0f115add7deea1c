"""
Storage services for blob files.

This package provides a uniform upload/download/delete/URL contract with
interchangeable local filesystem and Azure Blob Storage implementations.
"""

from app.storage.base import StorageService
from app.storage.local import LocalFilesystemService
from app.storage.azure import AzureBlobService
from app.storage.exceptions import (
    BlobNotFoundError,
    IntegrityError,
    StorageError,
)
from app.storage.instrumentation import Instrumenter, StorageEvent, instrumenter
from app.storage.lookup import BlobLookup, LookupStatus

__all__ = [
    "StorageService",
    "LocalFilesystemService",
    "AzureBlobService",
    "BlobNotFoundError",
    "IntegrityError",
    "StorageError",
    "Instrumenter",
    "StorageEvent",
    "instrumenter",
    "BlobLookup",
    "LookupStatus",
]
