# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic response models for the upload endpoint."""

from typing import List

from pydantic import BaseModel, Field


class UploadedFileResponse(BaseModel):
    filename: str
    url: str
    size: int
    mime_type: str = Field(serialization_alias="mimeType")


class UploadResponse(BaseModel):
    uploaded: List[UploadedFileResponse]
