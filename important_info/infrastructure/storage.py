"""Attachment storage: Azure Blob Storage with a local disk fallback."""

from __future__ import annotations

import logging
import secrets
import time
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Final, Optional

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings

from important_info.config import Settings, get_settings
from important_info.domain.entities import (
    ATTACHMENT_KIND_IMAGE,
    ATTACHMENT_KIND_PDF,
    Attachment,
    attachment_kind_for,
)
from important_info.domain.exceptions import AttachmentRejectedError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES: Final[frozenset[str]] = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
    }
)
_FOLDERS_BY_KIND: Final[dict[str, str]] = {
    ATTACHMENT_KIND_PDF: "pdf",
    ATTACHMENT_KIND_IMAGE: "images",
}
_DEFAULT_FOLDER: Final[str] = "documents"
BLOB_PREFIX: Final[str] = "blob:"
FILE_PREFIX: Final[str] = "file:"


@lru_cache
def _get_container_client(connection_string: str, container_name: str) -> ContainerClient:
    service_client = BlobServiceClient.from_connection_string(connection_string)
    try:
        service_client.create_container(container_name)
    except ResourceExistsError:
        pass
    return service_client.get_container_client(container_name)


def upload_blob(
    container_client: ContainerClient,
    blob_path: str,
    data: bytes,
    *,
    content_type: Optional[str] = None,
) -> str:
    """Upload ``data`` at ``blob_path`` and return the blob URL."""

    blob_client = container_client.get_blob_client(blob_path)
    content_settings = None
    if content_type is not None:
        content_settings = ContentSettings(content_type=content_type)
    blob_client.upload_blob(
        data,
        overwrite=True,
        content_settings=content_settings,
    )
    return blob_client.url


def delete_blob(container_client: ContainerClient, blob_path: str) -> None:
    """Delete the blob located at ``blob_path`` if it exists."""

    blob_client = container_client.get_blob_client(blob_path)
    try:
        blob_client.delete_blob()
    except ResourceNotFoundError:
        return


class AttachmentStorage:
    """Store uploaded files and hand back content references.

    Blob storage is used when configured. If it is not, or the upload fails,
    the file lands under ``UPLOAD_DIR`` and is served from ``/uploads`` so the
    announcement can still be created.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._upload_dir = Path(self._settings.upload_dir)

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def validate(self, *, mime_type: str | None, size_bytes: int) -> None:
        if mime_type not in ALLOWED_MIME_TYPES:
            raise AttachmentRejectedError(
                "Invalid file type. Only PDF, DOC, DOCX, JPG, JPEG, PNG, GIF are allowed."
            )
        if size_bytes > self._settings.max_attachment_bytes:
            raise AttachmentRejectedError(
                f"Files cannot exceed {self._settings.max_attachment_bytes} bytes",
                too_large=True,
            )

    def store(self, *, data: bytes, original_name: str, mime_type: str | None) -> Attachment:
        """Persist ``data`` and return the attachment reference."""

        self.validate(mime_type=mime_type, size_bytes=len(data))
        kind = attachment_kind_for(mime_type)
        folder = _FOLDERS_BY_KIND.get(kind, _DEFAULT_FOLDER)
        filename = _unique_filename(original_name)
        relative_path = f"{folder}/{filename}"

        if self._settings.blob_storage_enabled:
            try:
                container = _get_container_client(
                    self._settings.azure_storage_connection_string or "",
                    self._settings.azure_storage_container_name or "",
                )
                url = upload_blob(container, relative_path, data, content_type=mime_type)
            except (AzureError, ValueError) as exc:
                logger.warning(
                    "Blob upload of '%s' failed (%s); storing it locally", original_name, exc
                )
            else:
                return Attachment(
                    filename=filename,
                    original_name=original_name,
                    content_ref=url,
                    kind=kind,
                    size_bytes=len(data),
                    storage_path=f"{BLOB_PREFIX}{relative_path}",
                )

        destination = self._upload_dir / folder / filename
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
        base_url = self._settings.public_base_url.rstrip("/")
        return Attachment(
            filename=filename,
            original_name=original_name,
            content_ref=f"{base_url}/uploads/{relative_path}",
            kind=kind,
            size_bytes=len(data),
            storage_path=f"{FILE_PREFIX}{relative_path}",
        )

    def release(self, attachment: Attachment) -> bool:
        """Remove the stored object behind ``attachment``; failures are only logged."""

        storage_path = attachment.storage_path or ""
        try:
            if storage_path.startswith(BLOB_PREFIX):
                if not self._settings.blob_storage_enabled:
                    logger.warning("Cannot release blob %s: storage not configured", storage_path)
                    return False
                container = _get_container_client(
                    self._settings.azure_storage_connection_string or "",
                    self._settings.azure_storage_container_name or "",
                )
                delete_blob(container, storage_path[len(BLOB_PREFIX) :])
                return True
            if storage_path.startswith(FILE_PREFIX):
                relative = PurePosixPath(storage_path[len(FILE_PREFIX) :])
                if relative.is_absolute() or ".." in relative.parts:
                    logger.warning("Refusing to delete attachment outside uploads: %s", storage_path)
                    return False
                (self._upload_dir / relative).unlink(missing_ok=True)
                return True
        except (AzureError, OSError, ValueError):
            logger.exception("Could not release attachment %s", attachment.filename)
            return False
        return False


def _unique_filename(original_name: str) -> str:
    suffix = PurePosixPath(original_name or "").suffix.lower()
    return f"attachment-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"


__all__ = [
    "ALLOWED_MIME_TYPES",
    "AttachmentStorage",
    "upload_blob",
    "delete_blob",
]
