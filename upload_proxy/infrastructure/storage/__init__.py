"""
Object storage integration for uploaded files.

Supports Google Cloud Storage via google-cloud-storage.
Includes mock mode for local development without credentials.
"""

from .client import (
    GCSStorageClient,
    MockStorageClient,
    ObjectWriter,
    StorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)

__all__ = [
    "GCSStorageClient",
    "MockStorageClient",
    "ObjectWriter",
    "StorageClient",
    "StorageConfig",
    "StorageError",
    "create_storage_client",
]
