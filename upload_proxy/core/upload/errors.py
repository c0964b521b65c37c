"""
Upload failure taxonomy.

Every failure terminates the request. Each class carries the HTTP status
it is reported with so the API layer renders them uniformly.
"""


class UploadError(Exception):
    """Base class for failures reported to the uploader's caller."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AccessDenied(UploadError):
    """The request did not pass the origin policy."""

    status_code = 400


class BadRequest(UploadError):
    """The upload field is missing or the multipart body is malformed."""

    status_code = 404


class IOFailure(UploadError):
    """Reading the inbound file or writing/committing the object failed."""

    status_code = 500


class DependencyInitFailure(UploadError):
    """The storage client could not be constructed."""

    status_code = 500
