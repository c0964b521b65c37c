"""
File upload logic.

Contains the origin policy, object naming, the upload error taxonomy and
the uploader that copies a file into object storage.
"""

from .errors import (
    AccessDenied,
    BadRequest,
    DependencyInitFailure,
    IOFailure,
    UploadError,
)
from .models import IncomingFile, StoredObject, UploadConfig
from .naming import build_object_name, public_url, sanitize_filename
from .policy import referer_allowed
from .uploader import FileUploader, ObjectStore

__all__ = [
    "AccessDenied",
    "BadRequest",
    "DependencyInitFailure",
    "IOFailure",
    "UploadError",
    "IncomingFile",
    "StoredObject",
    "UploadConfig",
    "build_object_name",
    "public_url",
    "sanitize_filename",
    "referer_allowed",
    "FileUploader",
    "ObjectStore",
]
