"""
Streams an uploaded file into object storage.

The flow is strictly sequential and stops at the first failure:
rewind the source, name the object, obtain the store, open a writer,
copy, commit. Nothing is retried and partial objects left by a failed
copy are not cleaned up.

Storage calls block on the network, so each one runs in a worker thread
to keep the event loop free for other requests.
"""

import asyncio
import logging
import time
from typing import BinaryIO, Callable, Optional, Protocol

from .errors import DependencyInitFailure, IOFailure
from .models import IncomingFile, StoredObject, UploadConfig
from .naming import build_object_name, sanitize_filename

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ObjectWriter(Protocol):
    """A write stream to a single object. close() commits it."""

    def write(self, data: bytes) -> int:
        ...

    def close(self) -> None:
        ...


class ObjectStore(Protocol):
    """
    Interface for the object store.

    The uploader doesn't care whether this is GCS or an in-memory mock.
    It only needs to open a writer for a named object in a bucket.
    """

    def open_writer(
        self,
        bucket_name: str,
        object_name: str,
        content_type: Optional[str] = None,
    ) -> ObjectWriter:
        ...


def copy_stream(source: BinaryIO, writer: ObjectWriter, chunk_size: int) -> int:
    """Copy source into writer until EOF. Returns bytes copied."""
    total = 0
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            return total
        writer.write(chunk)
        total += len(chunk)


# ---------------------------------------------------------------------------
# Uploader
# ---------------------------------------------------------------------------

class FileUploader:
    """
    Uploads one file per call into the configured bucket.

    The store is obtained through a factory on each call rather than
    passed in, so a store that cannot be built fails the upload (as a
    DependencyInitFailure) instead of failing before the request is
    validated.
    """

    def __init__(
        self,
        storage_factory: Callable[[], ObjectStore],
        config: UploadConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage_factory = storage_factory
        self._config = config
        self._clock = clock

    def object_name_for(self, filename: str) -> str:
        if self._config.sanitize_filenames:
            filename = sanitize_filename(filename)
        return build_object_name(filename, self._clock())

    async def upload(self, incoming: IncomingFile) -> StoredObject:
        """
        Store the file and return where it landed.

        Raises:
            IOFailure: the source could not be read, or the object could
                not be opened, written or committed
            DependencyInitFailure: no bucket configured, or the store
                could not be constructed
        """
        source = incoming.stream
        try:
            await asyncio.to_thread(source.seek, 0)
        except (OSError, ValueError) as e:
            raise IOFailure(str(e)) from e

        object_name = self.object_name_for(incoming.filename)
        bucket_name = self._config.bucket_name

        if not bucket_name:
            raise DependencyInitFailure("upload bucket is not configured")

        try:
            storage = await asyncio.to_thread(self._storage_factory)
        except Exception as e:
            logger.error(
                "Failed to create storage client",
                extra={"error": str(e)},
            )
            raise DependencyInitFailure(str(e)) from e

        try:
            writer = await asyncio.to_thread(
                storage.open_writer, bucket_name, object_name, incoming.content_type
            )
        except Exception as e:
            raise IOFailure(str(e)) from e

        try:
            size = await asyncio.to_thread(
                copy_stream, source, writer, self._config.chunk_size
            )
        except Exception as e:
            logger.error(
                "Failed to copy upload",
                extra={"bucket": bucket_name, "object_name": object_name, "error": str(e)},
            )
            raise IOFailure(str(e)) from e

        # Until close() returns the object is not durable.
        try:
            await asyncio.to_thread(writer.close)
        except Exception as e:
            logger.error(
                "Failed to commit upload",
                extra={"bucket": bucket_name, "object_name": object_name, "error": str(e)},
            )
            raise IOFailure(str(e)) from e

        stored = StoredObject(
            bucket=bucket_name,
            object_name=object_name,
            size_bytes=size,
            url_base=self._config.public_url_base,
        )

        logger.info(
            "Stored upload",
            extra={
                "bucket": bucket_name,
                "object_name": object_name,
                "size_bytes": size,
                "content_type": incoming.content_type,
            },
        )

        return stored
