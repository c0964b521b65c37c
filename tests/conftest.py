"""
Shared fixtures.

The API tests run against a fresh app built from environment settings,
with the uploader dependency overridden to use an in-memory store and a
controllable clock.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from upload_proxy.api.dependencies import get_file_uploader, reset_storage_client
from upload_proxy.config.settings import get_settings
from upload_proxy.core.upload import FileUploader, UploadConfig
from upload_proxy.infrastructure.storage.client import MockStorageClient

TEST_BUCKET = "test-bucket"


class FakeClock:
    """Callable stand-in for time.time that only moves when told to."""

    def __init__(self, start: float) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    # .25 keeps the millisecond conversion exact in binary floating point
    return FakeClock(datetime(2024, 3, 5, 14, 30, 0).timestamp() + 0.25)


@pytest.fixture
def storage() -> MockStorageClient:
    return MockStorageClient()


@pytest.fixture
def upload_config() -> UploadConfig:
    return UploadConfig(bucket_name=TEST_BUCKET)


@pytest.fixture
def uploader(storage, upload_config, clock) -> FileUploader:
    return FileUploader(
        storage_factory=lambda: storage,
        config=upload_config,
        clock=clock,
    )


@pytest.fixture
def configured_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_UPLOAD_BUCKET", TEST_BUCKET)
    monkeypatch.setenv("STORAGE_MOCK_MODE", "true")
    get_settings.cache_clear()
    reset_storage_client()
    yield
    get_settings.cache_clear()
    reset_storage_client()


@pytest.fixture
def app(configured_env, uploader):
    from upload_proxy.main import create_app

    app = create_app()
    app.dependency_overrides[get_file_uploader] = lambda: uploader
    return app


@pytest.fixture
def client(app):
    # Server errors are asserted on as responses, not re-raised
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
