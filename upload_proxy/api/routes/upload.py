"""
File upload endpoint.

POST /upload takes a multipart body with a single `file` field and
streams it into the configured bucket. Every outcome is a JSON object
with `success` and `error` flags; failures add a `message` and use the
status code of the matching UploadError subclass:

- 400: Referer does not name the allowed site
- 404: no usable `file` field in the body
- 500: reading, writing or committing the file failed

The multipart body is parsed here rather than by a File() parameter so
the referer is checked before any of the body is read.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Header, Request
from pydantic import BaseModel, ConfigDict, Field
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from ...core.upload import AccessDenied, BadRequest, IncomingFile, referer_allowed
from ..dependencies import FileUploaderDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FIELD = "file"
SUCCESS_MESSAGE = "File uploaded successfully."


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class UploadSuccess(BaseModel):
    """Response after a file has been committed to storage."""
    model_config = ConfigDict(frozen=True)

    success: bool = True
    error: bool = False
    message: str = Field(description="Status message")
    url: str = Field(description="Public URL of the stored object")


class UploadFailure(BaseModel):
    """Response for any failed upload."""
    model_config = ConfigDict(frozen=True)

    success: bool = False
    error: bool = True
    message: str = Field(description="Human-readable cause")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=UploadSuccess,
    summary="Upload a file",
    description="Store a multipart `file` field in the upload bucket and return its public URL",
    responses={
        400: {"model": UploadFailure, "description": "Referer check failed"},
        404: {"model": UploadFailure, "description": "Missing or malformed file field"},
        500: {"model": UploadFailure, "description": "Storage or I/O failure"},
    },
)
async def upload_file(
    request: Request,
    uploader: FileUploaderDep,
    settings: SettingsDep,
    referer: Annotated[Optional[str], Header()] = None,
) -> UploadSuccess:
    if not referer_allowed(referer, settings.allowed_referer):
        logger.warning(
            "Rejected upload with disallowed referer",
            extra={"referer": referer or "", "client": request.client.host if request.client else None},
        )
        raise AccessDenied("Invalid Request")

    try:
        form = await request.form()
    except MultiPartException as e:
        raise BadRequest(e.message) from e
    except StarletteHTTPException as e:
        # Starlette re-raises multipart errors as HTTPException inside an app
        raise BadRequest(str(e.detail)) from e

    # Closing the form closes every spooled file it holds
    try:
        # First part wins when the field is repeated
        parts = form.getlist(UPLOAD_FIELD)
        upload = parts[0] if parts else None
        # A blank file input arrives as a part with filename=""
        if not isinstance(upload, UploadFile) or not upload.filename:
            raise BadRequest(f"no such file: multipart field '{UPLOAD_FIELD}' is missing")

        incoming = IncomingFile(
            filename=upload.filename,
            stream=upload.file,
            content_type=upload.content_type,
        )
        stored = await uploader.upload(incoming)
    finally:
        await form.close()

    return UploadSuccess(message=SUCCESS_MESSAGE, url=stored.url)
