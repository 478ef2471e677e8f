"""Endpoints for the notification inbox and the live-push websocket."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from important_info.application.use_cases.notifications import (
    clear_all_notifications as clear_all_notifications_uc,
    count_unread_notifications as count_unread_notifications_uc,
    list_notifications as list_notifications_uc,
    mark_all_notifications_read as mark_all_notifications_read_uc,
)
from important_info.domain.entities import Principal
from important_info.infrastructure.database import get_db
from important_info.infrastructure.notifications import LivePushGateway, LivePushPublisher
from important_info.interfaces.api.dependencies import (
    get_current_principal,
    get_live_push_publisher,
)
from important_info.interfaces.api.schemas import (
    MessageResponse,
    NotificationPage,
    NotificationRead,
    PaginationRead,
    UnreadCountRead,
)
from important_info.utils import PageRequest

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=NotificationPage)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_principal),
) -> NotificationPage:
    """Return the caller's inbox rows, newest first."""

    result = list_notifications_uc(
        db, principal=current_user, page_request=PageRequest(page=page, page_size=limit)
    )
    return NotificationPage(
        items=[NotificationRead.from_entry(item) for item in result.items],
        pagination=PaginationRead.from_page(result),
    )


@router.get("/unread-count", response_model=UnreadCountRead)
def unread_count(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_principal),
) -> UnreadCountRead:
    return UnreadCountRead(count=count_unread_notifications_uc(db, principal=current_user))


@router.put("/mark-all-read", response_model=MessageResponse)
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_principal),
    publisher: LivePushPublisher = Depends(get_live_push_publisher),
) -> MessageResponse:
    mark_all_notifications_read_uc(db, principal=current_user, publisher=publisher)
    return MessageResponse(message="All notifications marked as read")


@router.delete("/clear-all", response_model=MessageResponse)
def clear_all(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_principal),
    publisher: LivePushPublisher = Depends(get_live_push_publisher),
) -> MessageResponse:
    clear_all_notifications_uc(db, principal=current_user, publisher=publisher)
    return MessageResponse(message="All notifications cleared")


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Live-push channel; clients declare which channels they listen on.

    Accepted messages: ``{"type": "join-user", "user_id", "role"}``,
    ``{"type": "join-admin"}`` and ``{"type": "ping"}``.
    """

    gateway: LivePushGateway = websocket.app.state.live_push_gateway
    await gateway.connect(websocket)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue
            reply = _handle_message(gateway, websocket, message)
            if reply is not None:
                await websocket.send_json(reply)
    except WebSocketDisconnect:
        gateway.disconnect(websocket)
    except Exception:  # pragma: no cover - connection torn down unexpectedly
        gateway.disconnect(websocket)
        raise


def _handle_message(
    gateway: LivePushGateway, websocket: WebSocket, message: dict[str, Any]
) -> dict[str, Any] | None:
    message_type = message.get("type")
    if message_type == "ping":
        return {"type": "pong"}

    if message_type == "join-user":
        user_id = message.get("user_id") or message.get("userId")
        if user_id in (None, ""):
            return {"type": "error", "detail": "user_id is required"}
        role = message.get("role")
        channel = gateway.join_user(websocket, str(user_id), str(role) if role else None)
        logger.debug("Websocket joined %s", channel)
        return {"type": "joined", "channel": channel}

    if message_type == "join-admin":
        return {"type": "joined", "channel": gateway.join_admin(websocket)}

    return None
