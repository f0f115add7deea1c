"""
Storage dependency injection for FastAPI.

This module provides the FastAPI dependency that builds the configured
storage service, and the URL builder that points local blob URLs at the
blob redemption endpoint.
"""
from app.config import settings
from app.storage.azure import AzureBlobService
from app.storage.base import StorageService
from app.storage.local import LocalFilesystemService, default_url_builder


def blob_url_builder(token: str, params: dict[str, str]) -> str:
    """Build a URL for the /blobs/{token} endpoint of the v1 API."""
    return f"{settings.API_V1_PREFIX}{default_url_builder(token, params)}"


def get_storage() -> StorageService:
    """
    Return storage service based on configuration.

    This allows switching between local and Azure storage
    by changing the STORAGE_SERVICE environment variable.

    Returns:
        StorageService instance (local or Azure)

    Raises:
        ValueError: If STORAGE_SERVICE is not supported
    """
    if settings.STORAGE_SERVICE == "local":
        return LocalFilesystemService(
            root=settings.STORAGE_ROOT,
            url_builder=blob_url_builder,
        )

    if settings.STORAGE_SERVICE == "azure":
        return AzureBlobService(
            path=settings.AZURE_STORAGE_PATH,
            storage_account_name=settings.AZURE_STORAGE_ACCOUNT_NAME,
            storage_access_key=settings.AZURE_STORAGE_ACCESS_KEY,
            container=settings.AZURE_STORAGE_CONTAINER,
        )

    raise ValueError(f"Unknown storage service: {settings.STORAGE_SERVICE}")
