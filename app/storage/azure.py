"""
Azure Blob Storage service.

Wraps the azure-storage-blob SDK. Uploads, downloads and deletes go through
a container client; URLs are signed offline with shared access signatures.
"""
import base64
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from typing import Any, BinaryIO

from azure.core.exceptions import AzureError, HttpResponseError, ResourceNotFoundError
from azure.storage.blob import (
    BlobSasPermissions,
    BlobServiceClient,
    BlobType,
    ContentSettings,
    generate_blob_sas,
)

from app.storage.base import AZURE_CHUNK_SIZE, StorageService, content_disposition
from app.storage.exceptions import BlobNotFoundError, IntegrityError
from app.storage.instrumentation import Instrumenter
from app.storage.lookup import BlobLookup

# Error codes the Blob service returns when Content-MD5 does not match the body
CHECKSUM_ERROR_CODES = ("Md5Mismatch", "InvalidMd5")

# Largest body a single Put Blob accepts. Staged block uploads cannot carry a
# whole-blob transactional Content-MD5, so every upload goes in one request.
MAX_SINGLE_PUT_SIZE = 5000 * 1024 * 1024


class AzureBlobService(StorageService):
    """
    Azure Blob Storage service.

    Blobs live in one container; the public address of a blob is
    ``<path>/<container>/<key>``.
    """

    service_name = "Azure"

    def __init__(
        self,
        path: str,
        storage_account_name: str,
        storage_access_key: str,
        container: str,
        instrumenter: Instrumenter | None = None,
    ):
        """
        Initialize Azure storage service.

        Args:
            path: Blob endpoint, e.g. https://<account>.blob.core.windows.net
            storage_account_name: Storage account name
            storage_access_key: Storage account shared key (base64)
            container: Container holding the blobs
            instrumenter: Event publisher (default: shared instrumenter)
        """
        super().__init__(instrumenter)
        self.path = path.rstrip("/")
        self.storage_account_name = storage_account_name
        self.storage_access_key = storage_access_key
        self.container = container

        self.client = BlobServiceClient(
            account_url=self.path,
            credential={
                "account_name": storage_account_name,
                "account_key": storage_access_key,
            },
            max_single_put_size=MAX_SINGLE_PUT_SIZE,
        )
        self.blobs = self.client.get_container_client(container)

    def upload(
        self,
        key: str,
        io: BinaryIO | bytes,
        checksum: str | None = None,
    ) -> None:
        """
        Upload a block blob, letting the service verify ``checksum``.

        Raises:
            IntegrityError: If the service rejects the upload's Content-MD5
        """
        with self.instrument("upload", key, checksum=checksum):
            options = {}
            if checksum:
                options["content_settings"] = ContentSettings(
                    content_md5=bytearray(base64.b64decode(checksum))
                )
                # Transactional MD5, checked by the service against the body
                options["headers"] = {"Content-MD5": checksum}

            try:
                self.blobs.upload_blob(
                    key,
                    io,
                    blob_type=BlobType.BLOCKBLOB,
                    overwrite=True,
                    **options,
                )
            except HttpResponseError as e:
                if checksum and getattr(e, "error_code", None) in CHECKSUM_ERROR_CODES:
                    raise IntegrityError(key, checksum) from e
                raise

    def delete(self, key: str) -> None:
        with self.instrument("delete", key):
            try:
                self.blobs.delete_blob(key)
            except ResourceNotFoundError:
                pass

    def lookup(self, key: str) -> BlobLookup:
        try:
            properties = self.blobs.get_blob_client(key).get_blob_properties()
        except ResourceNotFoundError:
            return BlobLookup.not_found()
        except AzureError as e:
            return BlobLookup.failed(e)
        return BlobLookup.found(properties.size)

    def url(
        self,
        key: str,
        *,
        expires_in: int,
        disposition: str,
        filename: str,
    ) -> str:
        with self.instrument("url", key) as payload:
            generated_url = self._signed_url(
                key,
                BlobSasPermissions(read=True),
                expires_in,
                content_disposition=content_disposition(disposition, filename),
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
            generated_url = self._signed_url(
                key, BlobSasPermissions(read=True, write=True), expires_in
            )

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
        return {
            "Content-Type": content_type,
            "Content-MD5": checksum,
            "x-ms-blob-type": "BlockBlob",
        }

    def url_for(self, key: str) -> str:
        return f"{self.path}/{self.container}/{key}"

    def _signed_url(
        self,
        key: str,
        permission: BlobSasPermissions,
        expires_in: int,
        **sas_options: Any,
    ) -> str:
        sas_token = generate_blob_sas(
            account_name=self.storage_account_name,
            container_name=self.container,
            blob_name=key,
            account_key=self.storage_access_key,
            permission=permission,
            expiry=self._expiry(expires_in),
            **sas_options,
        )
        return f"{self.url_for(key)}?{sas_token}"

    def _expiry(self, expires_in: int) -> datetime:
        return datetime.now(timezone.utc) + timedelta(seconds=expires_in)

    def _read(self, key: str) -> bytes:
        try:
            return self.blobs.download_blob(key).readall()
        except ResourceNotFoundError as e:
            raise BlobNotFoundError(key) from e

    def _stream(self, key: str) -> Iterator[bytes]:
        """Read the blob in 5MB ranges, one request per chunk."""
        lookup = self.lookup(key)
        if lookup.is_missing:
            raise BlobNotFoundError(key)
        if lookup.error is not None:
            raise lookup.error

        offset = 0
        while offset < lookup.size:
            yield self.blobs.download_blob(
                key, offset=offset, length=AZURE_CHUNK_SIZE
            ).readall()
            offset += AZURE_CHUNK_SIZE
