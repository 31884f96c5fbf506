# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Upload endpoint – POST /uploads (multipart/form-data, field ``files``).

The response lists, per stored file, the public URL under which the static
mount serves it.  Those URLs are what the client later sends as a ticket's
``pictures``.

Size limits are enforced while the body is read, not after: an announced
``Content-Length`` beyond what a full batch can weigh is refused before
parsing starts, and parsing stops at the first file part that grows past
the per-file limit or at the file part that exceeds the count limit.
"""

from typing import List
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from helpdesk.core.config import Settings
from helpdesk.core.errors import PayloadTooLarge, ValidationError
from helpdesk.core.logger import logger
from helpdesk.core.security import app_settings, require_user
from helpdesk.uploads.schemas import UploadedFileResponse, UploadResponse
from helpdesk.uploads.service import IncomingFile, UploadService

router = APIRouter(prefix="/uploads", tags=["uploads"])

# Accepted multipart field names
_FIELDS = ("files", "files[]")

# Non-file form fields tolerated alongside the files
_MAX_FIELDS = 16
# Boundaries, part headers and the small text fields
_FORM_OVERHEAD = 1024 * 1024


class UploadFormParser(MultiPartParser):
    """Multipart parser that aborts as soon as one part exceeds *max_part_bytes*."""

    def __init__(self, headers, stream, *, max_part_bytes: int, **kwargs):
        super().__init__(headers, stream, **kwargs)
        self.max_part_bytes = max_part_bytes
        self._part_bytes = 0

    def on_part_begin(self) -> None:
        super().on_part_begin()
        self._part_bytes = 0

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._part_bytes += end - start
        if self._part_bytes > self.max_part_bytes:
            raise PayloadTooLarge()
        super().on_part_data(data, start, end)


def get_upload_service(settings: Settings = Depends(app_settings)) -> UploadService:
    return UploadService(settings.upload_dir)


def _check_content_length(request: Request, service: UploadService) -> None:
    limit = service.max_files * service.max_bytes + _FORM_OVERHEAD
    try:
        announced = int(request.headers.get("content-length", ""))
    except ValueError:
        return
    if announced > limit:
        logger.warning("Upload rejected | content-length=%d", announced)
        raise PayloadTooLarge("Upload too large")


async def _read_form(request: Request, service: UploadService) -> FormData:
    parser = UploadFormParser(
        request.headers,
        request.stream(),
        # One file over the limit still parses so the service reports it
        max_files=service.max_files + 1,
        max_fields=_MAX_FIELDS,
        max_part_bytes=service.max_bytes,
    )
    try:
        return await parser.parse()
    except MultiPartException as exc:
        if exc.message.startswith("Too many files"):
            raise PayloadTooLarge("Too many files")
        raise ValidationError([{"path": "files", "message": exc.message}], message="Invalid upload")


def _incoming(upload: UploadFile) -> IncomingFile:
    upload.file.seek(0, 2)
    size = upload.file.tell()
    upload.file.seek(0)
    return IncomingFile(
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        size=size,
        stream=upload.file,
    )


@router.post("", response_model=UploadResponse)
async def upload_files(
    request: Request,
    user_id: int = Depends(require_user),
    service: UploadService = Depends(get_upload_service),
):
    """Store a batch of images and return where each one can be fetched."""
    content_type = request.headers.get("content-type", "").lower()
    if not content_type.startswith("multipart/form-data"):
        # No file parts possible: report it as an empty batch
        service.validate([])

    _check_content_length(request, service)
    form = await _read_form(request, service)
    try:
        uploads: List[UploadFile] = [
            value
            for field in _FIELDS
            for value in form.getlist(field)
            if isinstance(value, UploadFile)
        ]
        incoming = [_incoming(u) for u in uploads]
        stored = await run_in_threadpool(service.save, incoming)
    finally:
        await form.close()

    base_url = str(request.base_url).rstrip("/")
    return UploadResponse(
        uploaded=[
            UploadedFileResponse(
                filename=s.filename,
                url=f"{base_url}/uploads/{quote(s.filename)}",
                size=s.size,
                mime_type=s.mime_type,
            )
            for s in stored
        ]
    )
