"""Helper utilities shared across API route handlers."""

import json
from typing import Iterable

from fastapi import UploadFile, status

from important_info.application.use_cases.announcements import AttachmentUpload
from important_info.domain.exceptions import (
    AnnouncementValidationError,
    AttachmentRejectedError,
)


def parse_recipient_tokens(values: Iterable[str] | None) -> list[str]:
    """Flatten the ``recipients`` form fields into raw tokens.

    Each field may hold a JSON array (``["students", "u-1"]``) or a comma
    separated list (``students,u-1``); repeated fields are concatenated.
    """

    tokens: list[str] = []
    for value in values or ():
        text = (value or "").strip()
        if not text:
            continue
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError as exc:
                raise AnnouncementValidationError("Recipients must be a JSON array") from exc
            if not isinstance(decoded, list):
                raise AnnouncementValidationError("Recipients must be a JSON array")
            tokens.extend(str(item) for item in decoded)
        else:
            tokens.extend(part for part in text.split(",") if part.strip())
    return tokens


def parse_bool_flag(value: str | bool | None) -> bool:
    """Interpret the loosely typed ``urgent`` form field."""

    if isinstance(value, bool):
        return value
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def read_uploads(files: Iterable[UploadFile] | None) -> list[AttachmentUpload]:
    """Read multipart files into memory, leaving each stream rewound."""

    uploads: list[AttachmentUpload] = []
    for upload in files or []:
        try:
            data = upload.file.read()
        finally:
            upload.file.seek(0)
        uploads.append(
            AttachmentUpload(
                filename=upload.filename or "attachment",
                content_type=upload.content_type,
                data=data,
            )
        )
    return uploads


def rejected_upload_status(exc: AttachmentRejectedError) -> int:
    if exc.too_large:
        return status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    return status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
