import os

# Settings are loaded at import time, so the signing secret must be set first
os.environ.setdefault("STORAGE_SECRET_KEY", "test-secret-key-for-blob-tokens-0123456789")

import pytest
from fastapi.testclient import TestClient

from app.dependencies.storage import blob_url_builder, get_storage
from app.main import app
from app.storage.instrumentation import Instrumenter
from app.storage.local import LocalFilesystemService


class EventRecorder:
    """Instrumenter wrapper that keeps every published event."""

    def __init__(self):
        self.instrumenter = Instrumenter()
        self.events = []
        self.instrumenter.subscribe(self.events.append)

    @property
    def names(self) -> list[str]:
        return [event.name for event in self.events]


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def local_storage(tmp_path, recorder):
    """Local filesystem service rooted in a temporary directory."""
    return LocalFilesystemService(
        root=tmp_path,
        url_builder=blob_url_builder,
        instrumenter=recorder.instrumenter,
    )


@pytest.fixture
def client(local_storage):
    """Test client with the storage dependency pointed at a temporary directory."""

    def override_get_storage():
        return local_storage

    app.dependency_overrides[get_storage] = override_get_storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
