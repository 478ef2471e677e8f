"""Errors raised by the announcement domain and its use cases."""


class AnnouncementValidationError(ValueError):
    """Input the caller can fix: empty title/body, malformed recipient tokens."""


class AttachmentRejectedError(AnnouncementValidationError):
    """An uploaded file has an unsupported type or exceeds the size limits."""

    def __init__(self, message: str, *, too_large: bool = False) -> None:
        super().__init__(message)
        self.too_large = too_large


class AnnouncementNotFoundError(LookupError):
    """The requested announcement does not exist or is not visible."""


class UpstreamUnavailableError(RuntimeError):
    """The user directory could not be reached or answered with garbage."""


class StorageError(RuntimeError):
    """The persistence layer failed; details stay in the logs."""


__all__ = [
    "AnnouncementValidationError",
    "AttachmentRejectedError",
    "AnnouncementNotFoundError",
    "UpstreamUnavailableError",
    "StorageError",
]
