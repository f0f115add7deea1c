"""
Local filesystem storage service.

This module stores blobs as plain files under a root directory, using a
two-level sharded directory structure derived from the blob key.
"""
import os
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, BinaryIO
from urllib.parse import urlencode

from app.services.verified_key import encode_key
from app.storage.base import LOCAL_CHUNK_SIZE, StorageService, as_stream
from app.storage.exceptions import BlobNotFoundError
from app.storage.instrumentation import Instrumenter
from app.storage.lookup import BlobLookup

UrlBuilder = Callable[[str, dict[str, str]], str]


def default_url_builder(token: str, params: dict[str, str]) -> str:
    """Build a relative blob URL for a signed token."""
    url = f"/blobs/{token}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return url


class LocalFilesystemService(StorageService):
    """
    Local filesystem storage service.

    Uses sharded directory structure for bounded directory sizes:
    <root>/<key[0:2]>/<key[2:4]>/<key>

    The service never serves bytes over HTTP itself. ``url`` only signs a
    token and hands it to ``url_builder``; redeeming the token is the job
    of the blob endpoint the builder points at.
    """

    service_name = "Disk"

    def __init__(
        self,
        root: str | Path,
        url_builder: UrlBuilder | None = None,
        instrumenter: Instrumenter | None = None,
    ):
        """
        Initialize local storage service.

        Args:
            root: Base directory for blob storage
            url_builder: Callable turning a signed token and query params
                into a URL (default: relative ``/blobs/<token>``)
            instrumenter: Event publisher (default: shared instrumenter)
        """
        super().__init__(instrumenter)
        self.root = Path(root)
        self.url_builder = url_builder or default_url_builder

    def upload(
        self,
        key: str,
        io: BinaryIO | bytes,
        checksum: str | None = None,
    ) -> None:
        """
        Stream blob content to disk in 64KB chunks.

        The checksum is not verified by this service.
        """
        with self.instrument("upload", key, checksum=checksum):
            stream = as_stream(io)
            path = self.path_for(key)
            path.parent.mkdir(parents=True, exist_ok=True)

            with open(path, "wb") as f:
                while chunk := stream.read(LOCAL_CHUNK_SIZE):
                    f.write(chunk)

    def delete(self, key: str) -> None:
        with self.instrument("delete", key):
            try:
                os.remove(self.path_for(key))
            except FileNotFoundError:
                # Already deleted
                pass

    def lookup(self, key: str) -> BlobLookup:
        try:
            stat = self.path_for(key).stat()
        except FileNotFoundError:
            return BlobLookup.not_found()
        except OSError as e:
            return BlobLookup.failed(e)
        return BlobLookup.found(stat.st_size)

    def url(
        self,
        key: str,
        *,
        expires_in: int,
        disposition: str,
        filename: str,
    ) -> str:
        with self.instrument("url", key) as payload:
            token = encode_key(key, expires_in=expires_in, purpose="blob_key")
            generated_url = self.url_builder(
                token, {"disposition": disposition, "filename": filename}
            )

            payload["url"] = generated_url
            return generated_url

    def url_for_direct_upload(
        self,
        key: str,
        *,
        expires_in: int,
        content_type: str,
        content_length: int,
        checksum: str,
    ) -> str:
        with self.instrument("url", key) as payload:
            token = encode_key(
                key,
                expires_in=expires_in,
                purpose="blob_upload",
                content_type=content_type,
                content_length=content_length,
                checksum=checksum,
            )
            generated_url = self.url_builder(token, {})

            payload["url"] = generated_url
            return generated_url

    def headers_for_direct_upload(
        self,
        key: str,
        *,
        content_type: str,
        checksum: str,
        **kwargs: Any,
    ) -> dict[str, str]:
        return {"Content-Type": content_type}

    def path_for(self, key: str) -> Path:
        """
        Calculate blob path using sharded structure.

        Example: <root>/a3/b8/a3b8f2d4e1c9

        Segments are joined as text, so a leading "/" in the key does not
        make the path absolute.

        Raises:
            ValueError: If the key is empty or resolves outside root
        """
        if not key:
            raise ValueError("Blob key must not be empty")

        path = Path(f"{self.root}/{self.folder_for(key)}/{key}")
        if self.root.resolve() not in path.resolve().parents:
            raise ValueError(f"Blob key resolves outside storage root: {key}")
        return path

    def folder_for(self, key: str) -> str:
        return f"{key[0:2]}/{key[2:4]}"

    def _read(self, key: str) -> bytes:
        try:
            with open(self.path_for(key), "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise BlobNotFoundError(key) from e

    def _stream(self, key: str) -> Iterator[bytes]:
        try:
            f = open(self.path_for(key), "rb")
        except FileNotFoundError as e:
            raise BlobNotFoundError(key) from e

        with f:
            while chunk := f.read(LOCAL_CHUNK_SIZE):
                yield chunk
