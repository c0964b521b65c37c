"""
Domain models for file uploads.

These are plain values with no knowledge of HTTP or of the storage
SDK. The API layer builds an IncomingFile from the multipart body and
renders a StoredObject back into JSON.
"""

from dataclasses import dataclass
from typing import BinaryIO, Optional

from .naming import public_url


@dataclass(frozen=True)
class UploadConfig:
    """
    Settings the uploader needs, passed in explicitly.

    Built from application settings by the API dependencies so tests can
    construct one directly.
    """
    bucket_name: str
    public_url_base: str = "https://storage.googleapis.com"
    sanitize_filenames: bool = False
    chunk_size: int = 1024 * 1024


@dataclass(frozen=True)
class IncomingFile:
    """An uploaded file part as received from the client."""
    filename: str
    stream: BinaryIO
    content_type: Optional[str] = None


@dataclass(frozen=True)
class StoredObject:
    """
    A committed object in the store.

    Frozen because it describes something that already happened.
    """
    bucket: str
    object_name: str
    size_bytes: int
    url_base: str = "https://storage.googleapis.com"

    @property
    def url(self) -> str:
        return public_url(self.bucket, self.object_name, self.url_base)
