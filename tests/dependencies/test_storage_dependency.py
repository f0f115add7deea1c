import base64

import pytest

from app.config import settings
from app.dependencies.storage import blob_url_builder, get_storage
from app.storage.azure import AzureBlobService
from app.storage.local import LocalFilesystemService


def test_get_storage_returns_local_service(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STORAGE_SERVICE", "local")
    monkeypatch.setattr(settings, "STORAGE_ROOT", str(tmp_path))

    storage = get_storage()

    assert isinstance(storage, LocalFilesystemService)
    assert storage.root == tmp_path
    assert storage.url_builder is blob_url_builder


def test_get_storage_returns_azure_service(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_SERVICE", "azure")
    monkeypatch.setattr(settings, "AZURE_STORAGE_PATH", "https://acct.blob.core.windows.net")
    monkeypatch.setattr(settings, "AZURE_STORAGE_ACCOUNT_NAME", "acct")
    monkeypatch.setattr(
        settings, "AZURE_STORAGE_ACCESS_KEY", base64.b64encode(b"access-key").decode()
    )
    monkeypatch.setattr(settings, "AZURE_STORAGE_CONTAINER", "files")

    storage = get_storage()

    assert isinstance(storage, AzureBlobService)
    assert storage.url_for("abc") == "https://acct.blob.core.windows.net/files/abc"


def test_get_storage_rejects_unknown_service(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_SERVICE", "s3")

    with pytest.raises(ValueError, match="Unknown storage service: s3"):
        get_storage()


def test_blob_url_builder_uses_api_prefix():
    url = blob_url_builder("tok", {"disposition": "inline", "filename": "a b.txt"})

    assert url == "/api/v1/blobs/tok?disposition=inline&filename=a+b.txt"
