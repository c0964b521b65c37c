"""
Object storage client for uploaded files.

Supports Google Cloud Storage with mock mode for local development.
Writes are streamed: callers open a writer for an object, copy bytes
into it and close it to commit. Closing is what makes the object
durable; an object whose writer was never closed successfully must be
treated as not stored.

All methods here block on network I/O. Async callers run them in a
worker thread (see core.upload.uploader).
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ...core.upload.uploader import ObjectWriter

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """
    Configuration for the GCS client.

    Credentials are not part of the config: google-cloud-storage finds
    them through Application Default Credentials.
    """
    project: Optional[str] = None
    chunk_size: int = 1024 * 1024  # resumable upload chunk, multiple of 256 KiB


class StorageClient(Protocol):
    """
    Protocol for object storage operations.

    Using a protocol means tests can provide mocks and we can
    swap storage backends without changing dependent code.
    """

    def open_writer(
        self,
        bucket_name: str,
        object_name: str,
        content_type: Optional[str] = None,
    ) -> ObjectWriter:
        """Open a write stream to bucket_name/object_name."""
        ...


class _GCSObjectWriter:
    """Wraps a BlobWriter so failures surface as StorageError."""

    def __init__(self, blob_writer, bucket_name: str, object_name: str) -> None:
        self._writer = blob_writer
        self._bucket_name = bucket_name
        self._object_name = object_name

    def write(self, data: bytes) -> int:
        try:
            return self._writer.write(data)
        except Exception as e:
            logger.error(
                "Failed to write object data",
                extra={
                    "bucket": self._bucket_name,
                    "object_name": self._object_name,
                    "error": str(e),
                }
            )
            raise StorageError(f"Write failed: {e}") from e

    def close(self) -> None:
        try:
            self._writer.close()
        except Exception as e:
            logger.error(
                "Failed to commit object",
                extra={
                    "bucket": self._bucket_name,
                    "object_name": self._object_name,
                    "error": str(e),
                }
            )
            raise StorageError(f"Commit failed: {e}") from e


class GCSStorageClient:
    """
    Google Cloud Storage client.

    Wraps google-cloud-storage. One instance is shared across requests;
    the underlying client keeps an authorized HTTP session and is safe
    to use from multiple threads.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize the GCS client.

        Imported here (not at module level) so mock mode never touches
        google-cloud-storage or credential discovery.
        """
        try:
            from google.cloud import storage
        except ImportError:
            raise ImportError(
                "google-cloud-storage is required for GCS storage. "
                "Install with: pip install google-cloud-storage"
            )

        self._config = config
        self._client = storage.Client(project=config.project)

        logger.info(
            "Initialized GCS storage client",
            extra={"project": self._client.project}
        )

    def open_writer(
        self,
        bucket_name: str,
        object_name: str,
        content_type: Optional[str] = None,
    ) -> ObjectWriter:
        """
        Open a resumable-upload writer for the object.

        An existing object with the same name is overwritten on commit.
        """
        kwargs = {"chunk_size": self._config.chunk_size, "ignore_flush": True}
        if content_type:
            kwargs["content_type"] = content_type

        try:
            blob = self._client.bucket(bucket_name).blob(object_name)
            blob_writer = blob.open("wb", **kwargs)
        except Exception as e:
            logger.error(
                "Failed to open object writer",
                extra={
                    "bucket": bucket_name,
                    "object_name": object_name,
                    "error": str(e),
                }
            )
            raise StorageError(f"Open failed: {e}") from e

        return _GCSObjectWriter(blob_writer, bucket_name, object_name)


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class _MockObjectWriter:
    """Buffers bytes in memory and publishes them to the store on close."""

    def __init__(self, store: "MockStorageClient", key: tuple[str, str]) -> None:
        self._store = store
        self._key = key
        self._buffer = io.BytesIO()
        self.closed = False

    def write(self, data: bytes) -> int:
        if self._store.fail_on_write:
            raise StorageError("Write failed: simulated write fault")
        return self._buffer.write(data)

    def close(self) -> None:
        if self._store.fail_on_commit:
            raise StorageError("Commit failed: simulated commit fault")
        data = self._buffer.getvalue()
        self._store.objects[self._key] = data
        self.closed = True

        logger.debug(
            "Stored object in mock storage",
            extra={
                "bucket": self._key[0],
                "object_name": self._key[1],
                "size_bytes": len(data),
            }
        )


class MockStorageClient:
    """
    In-memory storage for local development.

    Objects are stored in a dictionary keyed by (bucket, object_name).
    The fail_on_* flags inject faults at each stage of a write so
    tests can exercise the error paths.

    Not suitable for production, but perfect for development and testing.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.content_types: dict[tuple[str, str], Optional[str]] = {}
        self.writers_opened = 0
        self.fail_on_open = False
        self.fail_on_write = False
        self.fail_on_commit = False
        logger.info("Initialized mock storage client (in-memory)")

    def open_writer(
        self,
        bucket_name: str,
        object_name: str,
        content_type: Optional[str] = None,
    ) -> ObjectWriter:
        if self.fail_on_open:
            raise StorageError("Open failed: simulated open fault")

        key = (bucket_name, object_name)
        self.writers_opened += 1
        self.content_types[key] = content_type
        return _MockObjectWriter(self, key)

    def get_object(self, bucket_name: str, object_name: str) -> bytes:
        """Retrieve a committed object's bytes."""
        key = (bucket_name, object_name)
        if key not in self.objects:
            raise StorageError(f"Object not found: {bucket_name}/{object_name}")
        return self.objects[key]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> StorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        StorageClient implementation (GCS or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return GCSStorageClient(config)
