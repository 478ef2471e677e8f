"""Schemas for the standalone file upload endpoint."""

from pydantic import BaseModel


class UploadedFileRead(BaseModel):
    filename: str
    original_name: str
    url: str
    mime_type: str | None = None
    kind: str
    size_bytes: int


class UploadResponse(BaseModel):
    message: str
    files: list[UploadedFileRead]


__all__ = ["UploadedFileRead", "UploadResponse"]
