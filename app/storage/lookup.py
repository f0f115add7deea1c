"""
Tri-state blob lookup result.

Backends resolve a key to a BlobLookup instead of raising for absence, so
callers can tell a missing blob apart from a failed lookup without
exception handling.
"""
from dataclasses import dataclass
from enum import Enum


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class BlobLookup:
    status: LookupStatus
    size: int | None = None
    error: Exception | None = None

    @classmethod
    def found(cls, size: int) -> "BlobLookup":
        return cls(LookupStatus.FOUND, size=size)

    @classmethod
    def not_found(cls) -> "BlobLookup":
        return cls(LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: Exception) -> "BlobLookup":
        return cls(LookupStatus.ERROR, error=error)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def is_missing(self) -> bool:
        return self.status is LookupStatus.NOT_FOUND
