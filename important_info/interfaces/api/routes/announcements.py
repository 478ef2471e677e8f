"""API routes for important-information announcements."""

import logging

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from sqlalchemy.orm import Session

from important_info.application.use_cases import (
    count_unread as count_unread_uc,
    get_visible_announcement as get_visible_announcement_uc,
    list_visible as list_visible_uc,
)
from important_info.application.use_cases.announcements import (
    FanOutOrchestrator,
    create_announcement as create_announcement_uc,
    delete_announcement_for_user as delete_announcement_for_user_uc,
    list_announcements as list_announcements_uc,
    mark_announcement_read as mark_announcement_read_uc,
    purge_announcement as purge_announcement_uc,
)
from important_info.domain.entities import Principal
from important_info.domain.exceptions import (
    AnnouncementNotFoundError,
    AnnouncementValidationError,
    AttachmentRejectedError,
)
from important_info.infrastructure.database import get_db
from important_info.infrastructure.notifications import LivePushPublisher
from important_info.infrastructure.storage import AttachmentStorage
from important_info.interfaces.api.dependencies import (
    get_access_token,
    get_attachment_storage,
    get_current_principal,
    get_fan_out_orchestrator,
    get_live_push_publisher,
    get_max_attachments,
    require_admin,
)
from important_info.interfaces.api.routes_helpers import (
    parse_bool_flag,
    parse_recipient_tokens,
    read_uploads,
    rejected_upload_status,
)
from important_info.interfaces.api.schemas import (
    AnnouncementAdminPage,
    AnnouncementAdminRead,
    AnnouncementCreateResponse,
    AnnouncementPage,
    AnnouncementRead,
    MessageResponse,
    PaginationRead,
    UnreadCountRead,
)
from important_info.utils import PageRequest

router = APIRouter(prefix="/announcements", tags=["announcements"])
logger = logging.getLogger(__name__)


def _page_request(page: int, limit: int) -> PageRequest:
    return PageRequest(page=page, page_size=limit)


@router.post(
    "/",
    response_model=AnnouncementCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_announcement(
    background_tasks: BackgroundTasks,
    title: str = Form(...),
    message: str = Form(...),
    recipients: list[str] | None = Form(None),
    urgent: str | None = Form(None),
    attachments: list[UploadFile] | None = File(None),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(require_admin),
    access_token: str = Depends(get_access_token),
    orchestrator: FanOutOrchestrator = Depends(get_fan_out_orchestrator),
    storage: AttachmentStorage = Depends(get_attachment_storage),
    max_attachments: int = Depends(get_max_attachments),
) -> AnnouncementCreateResponse:
    """Create an announcement; role and ``all`` recipients are resolved in the background."""

    uploads = read_uploads(attachments)
    try:
        result = create_announcement_uc(
            db,
            orchestrator=orchestrator,
            storage=storage,
            sender=current_user,
            title=title,
            body=message,
            recipients=parse_recipient_tokens(recipients),
            urgent=parse_bool_flag(urgent),
            uploads=uploads,
            max_attachments=max_attachments,
            credential=access_token,
            schedule=background_tasks.add_task,
        )
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except AttachmentRejectedError as exc:
        raise HTTPException(status_code=rejected_upload_status(exc), detail=str(exc)) from exc
    except AnnouncementValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return AnnouncementCreateResponse(
        message="Announcement created successfully",
        announcement=AnnouncementAdminRead.from_entity(result.announcement),
        fan_out_status=result.status,
        notified_count=result.notified_count,
    )


@router.get("/admin/all", response_model=AnnouncementAdminPage)
def list_all_announcements(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> AnnouncementAdminPage:
    result = list_announcements_uc(db, page_request=_page_request(page, limit))
    return AnnouncementAdminPage(
        items=[AnnouncementAdminRead.from_entity(item) for item in result.items],
        pagination=PaginationRead.from_page(result),
    )


@router.delete("/admin/{announcement_id}", response_model=MessageResponse)
def purge_announcement(
    announcement_id: str,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
    storage: AttachmentStorage = Depends(get_attachment_storage),
) -> MessageResponse:
    """Permanently delete an announcement for everyone."""

    try:
        purge_announcement_uc(db, announcement_id=announcement_id, storage=storage)
    except AnnouncementNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MessageResponse(message="Announcement deleted permanently")


@router.get("/", response_model=AnnouncementPage)
def list_my_announcements(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_principal),
) -> AnnouncementPage:
    """Announcements visible to the caller, newest first, with their read state."""

    result = list_visible_uc(
        db,
        user_id=current_user.id,
        role=current_user.role,
        page_request=_page_request(page, limit),
    )
    return AnnouncementPage(
        items=[
            AnnouncementRead.from_entity(item.announcement, is_read=item.is_read)
            for item in result.items
        ],
        pagination=PaginationRead.from_page(result),
    )


@router.get("/unread-count", response_model=UnreadCountRead)
def unread_count(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_principal),
) -> UnreadCountRead:
    return UnreadCountRead(
        count=count_unread_uc(db, user_id=current_user.id, role=current_user.role)
    )


@router.get("/{announcement_id}", response_model=AnnouncementRead)
def get_announcement(
    announcement_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_principal),
) -> AnnouncementRead:
    try:
        visible = get_visible_announcement_uc(
            db,
            announcement_id=announcement_id,
            user_id=current_user.id,
            role=current_user.role,
        )
    except AnnouncementNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return AnnouncementRead.from_entity(visible.announcement, is_read=visible.is_read)


@router.put("/{announcement_id}/read", response_model=MessageResponse)
def mark_announcement_read(
    announcement_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_principal),
    publisher: LivePushPublisher = Depends(get_live_push_publisher),
) -> MessageResponse:
    try:
        get_visible_announcement_uc(
            db,
            announcement_id=announcement_id,
            user_id=current_user.id,
            role=current_user.role,
        )
        mark_announcement_read_uc(
            db,
            announcement_id=announcement_id,
            principal=current_user,
            publisher=publisher,
        )
    except AnnouncementNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MessageResponse(message="Announcement marked as read")


@router.delete("/{announcement_id}", response_model=MessageResponse)
def delete_announcement_for_me(
    announcement_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_principal),
) -> MessageResponse:
    """Hide the announcement from the caller only."""

    try:
        get_visible_announcement_uc(
            db,
            announcement_id=announcement_id,
            user_id=current_user.id,
            role=current_user.role,
        )
        delete_announcement_for_user_uc(
            db, announcement_id=announcement_id, principal=current_user
        )
    except AnnouncementNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MessageResponse(message="Announcement deleted")
