"""
Object naming for uploaded files.

Objects are laid out by upload date, then prefixed with the upload time
in epoch milliseconds:

    YYYY/MM/DD/<epoch-ms>-<original filename>

There is no collision detection. Two uploads of the same filename in the
same millisecond map to the same object, and the later commit wins.
"""

import re
from datetime import datetime
from pathlib import PurePosixPath

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def epoch_millis(timestamp: float) -> int:
    """Convert a time.time() reading to whole epoch milliseconds."""
    return int(timestamp * 1000)


def sanitize_filename(filename: str) -> str:
    """
    Reduce a client-supplied filename to a safe basename.

    Directory components are dropped and characters outside
    [A-Za-z0-9._-] collapse to a single underscore.
    """
    name = PurePosixPath(filename.replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("_", name)
    if name in ("", ".", ".."):
        return "file"
    return name


def build_object_name(filename: str, timestamp: float) -> str:
    """
    Build the destination object name for an upload.

    The date path uses the server's local calendar date and the numeric
    prefix is epoch milliseconds, both from the same clock reading, so
    names sort in upload order within a day. The filename is used as given.
    """
    date_path = datetime.fromtimestamp(timestamp).strftime("%Y/%m/%d/")
    return f"{date_path}{epoch_millis(timestamp)}-{filename}"


def public_url(bucket_name: str, object_name: str, base: str = "https://storage.googleapis.com") -> str:
    """Public URL of an object. Bucket and name are inserted unescaped."""
    return f"{base.rstrip('/')}/{bucket_name}/{object_name}"
