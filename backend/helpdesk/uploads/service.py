# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Image upload storage.

A batch is checked as a whole before the first byte hits the disk: one bad
file (wrong type, too big, too many files) rejects everything.  Writing is
per file and not transactional; if the disk fails half-way the files
already written stay behind.  They are harmless because no ticket refers to
them until the client sends their URLs.

File names never reuse the client's extension; it is derived from the
declared MIME type after that type passed the allow-list.
"""

import re
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Sequence

from helpdesk.core.errors import PayloadTooLarge, UnsupportedFileType, ValidationError
from helpdesk.core.logger import logger

MAX_FILES = 10
MAX_FILE_BYTES = 10 * 1024 * 1024  # 10 MiB

# MIME type → stored extension
ALLOWED_TYPES: Dict[str, str] = {
    "image/jpeg": "jpeg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}

_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]+")
_BASE_MAX = 50


@dataclass
class IncomingFile:
    """One part of the multipart batch, as handed over by the route."""

    filename: str
    content_type: str
    size: int
    stream: BinaryIO


@dataclass(frozen=True)
class StoredFile:
    filename: str
    size: int
    mime_type: str


def sanitize_basename(original: Optional[str]) -> str:
    """
    Original name without directory or extension, runs of unsafe characters
    collapsed to ``_``, truncated; ``file`` when nothing is left.
    """
    name = Path((original or "").replace("\\", "/")).name
    stem = name.rsplit(".", 1)[0] if "." in name[1:] else name
    return _UNSAFE.sub("_", stem)[:_BASE_MAX] or "file"


def build_filename(original: Optional[str], mime_type: str, stamp_ms: int) -> str:
    """``<sanitized-base>_<millisecond timestamp>.<ext from mime type>``"""
    return f"{sanitize_basename(original)}_{stamp_ms}.{ALLOWED_TYPES[mime_type]}"


def _normalize_mime(content_type: Optional[str]) -> str:
    # "image/png; charset=binary" → "image/png"
    return (content_type or "").split(";", 1)[0].strip().lower()


class UploadService:
    def __init__(self, upload_dir, max_files: int = MAX_FILES, max_bytes: int = MAX_FILE_BYTES):
        self.upload_dir = Path(upload_dir)
        self.max_files = max_files
        self.max_bytes = max_bytes

    def validate(self, files: Sequence[IncomingFile]) -> None:
        """Reject the whole batch on the first violated constraint."""
        if not files:
            raise ValidationError(
                [{"path": "files", "message": "At least one file is required"}],
                message="No files uploaded",
            )
        if len(files) > self.max_files:
            raise PayloadTooLarge("Too many files")
        for f in files:
            if _normalize_mime(f.content_type) not in ALLOWED_TYPES:
                logger.warning("Upload rejected | type=%s", f.content_type)
                raise UnsupportedFileType()
            if f.size > self.max_bytes:
                logger.warning("Upload rejected | size=%d", f.size)
                raise PayloadTooLarge()

    def _write(self, f: IncomingFile, mime_type: str) -> str:
        stamp = int(time.time() * 1000)
        while True:
            filename = build_filename(f.filename, mime_type, stamp)
            try:
                # "xb": never overwrite an existing upload
                with open(self.upload_dir / filename, "xb") as out:
                    f.stream.seek(0)
                    shutil.copyfileobj(f.stream, out)
                return filename
            except FileExistsError:
                stamp += 1

    def save(self, files: Sequence[IncomingFile]) -> List[StoredFile]:
        self.validate(files)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        stored = []
        for f in files:
            mime_type = _normalize_mime(f.content_type)
            filename = self._write(f, mime_type)
            stored.append(StoredFile(filename=filename, size=f.size, mime_type=mime_type))
            logger.info("Stored upload %s (%d bytes, %s)", filename, f.size, mime_type)
        return stored
