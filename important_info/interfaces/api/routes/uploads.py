"""Standalone upload endpoint returning links to the stored files."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from important_info.application.use_cases.announcements import store_attachments
from important_info.domain.entities import Principal
from important_info.domain.exceptions import (
    AnnouncementValidationError,
    AttachmentRejectedError,
)
from important_info.infrastructure.storage import AttachmentStorage
from important_info.interfaces.api.dependencies import (
    get_attachment_storage,
    get_current_principal,
    get_max_attachments,
)
from important_info.interfaces.api.routes_helpers import read_uploads, rejected_upload_status
from important_info.interfaces.api.schemas import UploadedFileRead, UploadResponse

router = APIRouter(prefix="/upload", tags=["uploads"])
logger = logging.getLogger(__name__)


@router.post("/", response_model=UploadResponse)
def upload_files(
    files: list[UploadFile] | None = File(None),
    current_user: Principal = Depends(get_current_principal),
    storage: AttachmentStorage = Depends(get_attachment_storage),
    max_attachments: int = Depends(get_max_attachments),
) -> UploadResponse:
    """Store files ahead of time so a client can reference them later."""

    uploads = read_uploads(files)
    if not uploads:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")

    try:
        stored = store_attachments(storage, uploads, max_files=max_attachments)
    except AttachmentRejectedError as exc:
        raise HTTPException(status_code=rejected_upload_status(exc), detail=str(exc)) from exc
    except AnnouncementValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    logger.info("User %s uploaded %s file(s)", current_user.id, len(stored))
    return UploadResponse(
        message="Files uploaded successfully",
        files=[
            UploadedFileRead(
                filename=attachment.filename,
                original_name=attachment.original_name,
                url=attachment.content_ref,
                mime_type=upload.content_type,
                kind=attachment.kind,
                size_bytes=attachment.size_bytes,
            )
            for upload, attachment in zip(uploads, stored)
        ],
    )
