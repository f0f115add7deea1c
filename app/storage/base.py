"""
Abstract base class for storage services.

This module defines the contract that every storage service (local
filesystem, Azure Blob Storage) implements, so that services can be swapped
by configuration without touching the callers.
"""
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from io import BytesIO
from typing import Any, BinaryIO

from app.storage.instrumentation import Instrumenter, instrumenter as default_instrumenter
from app.storage.lookup import BlobLookup

LOCAL_CHUNK_SIZE = 64 * 1024  # 64KB
AZURE_CHUNK_SIZE = 5 * 1024 * 1024  # 5MB


def content_disposition(disposition: str, filename: str) -> str:
    """Build a Content-Disposition header value with a filename hint."""
    return f'{disposition}; filename="{filename}"'


def as_stream(io: BinaryIO | bytes | bytearray) -> BinaryIO:
    """Wrap raw bytes in a file-like object; streams are returned as-is."""
    if isinstance(io, (bytes, bytearray)):
        return BytesIO(io)
    return io


class StorageService(ABC):
    """
    Abstract base class for storage services.

    Subclasses implement the backend-specific primitives. The public
    ``download`` and ``download_chunks`` methods are shared so that each
    logical download fires exactly one instrumentation event, whether the
    blob is read whole or streamed.
    """

    service_name = "Storage"

    def __init__(self, instrumenter: Instrumenter | None = None):
        self.instrumenter = instrumenter or default_instrumenter

    def instrument(self, name: str, key: str, **payload: Any):
        return self.instrumenter.instrument(
            name, key, service=self.service_name, **payload
        )

    @abstractmethod
    def upload(
        self,
        key: str,
        io: BinaryIO | bytes,
        checksum: str | None = None,
    ) -> None:
        """
        Store all bytes of ``io`` under ``key``.

        Args:
            key: Blob key
            io: File-like object (or raw bytes) with the blob content
            checksum: Optional base64-encoded MD5 digest of the content

        Raises:
            IntegrityError: If the backend verifies the checksum and it
                does not match the stored bytes
        """
        pass

    def download(
        self,
        key: str,
        sink: Callable[[bytes], Any] | None = None,
    ) -> bytes | None:
        """
        Read a blob, whole or in chunks.

        Without ``sink`` the whole blob is returned. With ``sink``, every
        chunk is passed to it in offset order and None is returned.

        Raises:
            BlobNotFoundError: If no blob is stored under ``key``
        """
        if sink is None:
            with self.instrument("download", key):
                return self._read(key)

        for chunk in self.download_chunks(key):
            sink(chunk)
        return None

    def download_chunks(self, key: str) -> Iterator[bytes]:
        """
        Yield a blob in backend-sized chunks.

        Chunks cover the blob in strictly increasing offset order with no
        gaps or overlaps. An empty blob yields nothing.

        The ``streaming_download`` event covers the read itself: it is
        published once the generator finishes, fails or is closed after
        being started. A generator closed before its first ``next()`` never
        touched storage and publishes nothing.

        Raises:
            BlobNotFoundError: If no blob is stored under ``key``
        """
        with self.instrument("streaming_download", key):
            yield from self._stream(key)

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a blob. Deleting a missing blob is a no-op."""
        pass

    def exists(self, key: str) -> bool:
        """
        Check whether a blob is stored under ``key``.

        Raises:
            Exception: The lookup error, if the backend could not be asked
        """
        with self.instrument("exist", key) as payload:
            lookup = self.lookup(key)
            if lookup.error is not None:
                raise lookup.error

            payload["exist"] = lookup.is_found
            return lookup.is_found

    @abstractmethod
    def lookup(self, key: str) -> BlobLookup:
        """Resolve ``key`` to a found / not found / error result without raising."""
        pass

    @abstractmethod
    def url(
        self,
        key: str,
        *,
        expires_in: int,
        disposition: str,
        filename: str,
    ) -> str:
        """
        Generate a time-limited, read-only download URL.

        Args:
            key: Blob key
            expires_in: Seconds until the URL expires
            disposition: Content-Disposition type (inline or attachment)
            filename: Filename hint for the served response

        Returns:
            Signed URL
        """
        pass

    @abstractmethod
    def url_for_direct_upload(
        self,
        key: str,
        *,
        expires_in: int,
        content_type: str,
        content_length: int,
        checksum: str,
    ) -> str:
        """Generate a time-limited URL a client can upload ``key`` to directly."""
        pass

    @abstractmethod
    def headers_for_direct_upload(
        self,
        key: str,
        *,
        content_type: str,
        checksum: str,
        **kwargs: Any,
    ) -> dict[str, str]:
        """Return the headers a direct-upload client must send."""
        pass

    @abstractmethod
    def _read(self, key: str) -> bytes:
        pass

    @abstractmethod
    def _stream(self, key: str) -> Iterator[bytes]:
        pass
