"""
Conftest for storage tests - in-memory Azure container, no network.
"""
import pytest

from app.storage.azure import MAX_SINGLE_PUT_SIZE, AzureBlobService
from tests.storage.azure_fakes import (
    ACCOUNT_KEY,
    ACCOUNT_NAME,
    BLOB_ENDPOINT,
    CONTAINER,
    FakeContainerClient,
)


@pytest.fixture
def fake_container():
    return FakeContainerClient(max_single_put_size=MAX_SINGLE_PUT_SIZE)


@pytest.fixture
def azure_storage(fake_container, recorder):
    """Azure service with its container client replaced by an in-memory fake."""
    service = AzureBlobService(
        path=BLOB_ENDPOINT,
        storage_account_name=ACCOUNT_NAME,
        storage_access_key=ACCOUNT_KEY,
        container=CONTAINER,
        instrumenter=recorder.instrumenter,
    )
    service.blobs = fake_container
    return service
