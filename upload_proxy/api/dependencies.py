"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests via app.dependency_overrides
- Configuration is centralized

Each dependency is a function that FastAPI calls when needed.
"""

import logging
import threading
from functools import partial
from typing import Annotated, Optional

from fastapi import Depends

from ..config.settings import Settings, get_settings
from ..core.upload import FileUploader, UploadConfig
from ..infrastructure.storage.client import StorageClient, StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

# Shared storage client, built on first upload
_storage_client: Optional[StorageClient] = None
_storage_lock = threading.Lock()


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

def get_storage_client(settings: Settings) -> StorageClient:
    """
    Return the process-wide storage client, creating it if needed.

    Not a FastAPI dependency on purpose: the uploader calls this only
    after the request has been validated, and it may block on credential
    discovery, so it runs in a worker thread. A failed construction is
    not cached; the next upload tries again.
    """
    global _storage_client

    with _storage_lock:
        if _storage_client is None:
            if settings.storage_mock_mode:
                _storage_client = create_storage_client(mock_mode=True)
                logger.info("Created shared mock storage client")
            else:
                config = StorageConfig(
                    project=settings.google_cloud_project,
                    chunk_size=settings.upload_chunk_size,
                )
                _storage_client = create_storage_client(config=config)
                logger.info("Created shared GCS storage client")
        return _storage_client


def reset_storage_client() -> None:
    """Drop the shared client. Used by tests."""
    global _storage_client
    with _storage_lock:
        _storage_client = None


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_upload_config(
    settings: Annotated[Settings, Depends(get_settings)],
) -> UploadConfig:
    return UploadConfig(
        bucket_name=settings.google_upload_bucket,
        public_url_base=settings.public_url_base,
        sanitize_filenames=settings.sanitize_filenames,
        chunk_size=settings.upload_chunk_size,
    )


def get_file_uploader(
    settings: Annotated[Settings, Depends(get_settings)],
    config: Annotated[UploadConfig, Depends(get_upload_config)],
) -> FileUploader:
    """Provide a FileUploader bound to the shared storage client."""
    return FileUploader(
        storage_factory=partial(get_storage_client, settings),
        config=config,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
FileUploaderDep = Annotated[FileUploader, Depends(get_file_uploader)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
