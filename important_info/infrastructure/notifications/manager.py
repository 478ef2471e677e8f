"""Channel membership and delivery for live-push websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Collection, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

USER_CHANNEL_PREFIX = "user-"
ADMIN_CHANNEL = "admin-room"


def user_channel(user_id: str) -> str:
    return f"{USER_CHANNEL_PREFIX}{user_id}"


@dataclass
class _Membership:
    user_channel: str | None = None
    role: str | None = None
    admin: bool = False


class LivePushGateway:
    """Track which websocket listens on which channel and deliver to them.

    Memberships are declared by the client when it joins. Delivery is best
    effort: a socket that fails to receive is dropped and nothing is queued
    for later.
    """

    def __init__(self) -> None:
        self._channels: DefaultDict[str, Set[WebSocket]] = defaultdict(set)
        self._memberships: dict[WebSocket, _Membership] = {}

    async def connect(self, websocket: WebSocket) -> None:
        """Accept ``websocket``; it receives nothing until it joins a channel."""

        await websocket.accept()
        self._memberships.setdefault(websocket, _Membership())

    def join_user(self, websocket: WebSocket, user_id: str, role: str | None = None) -> str:
        """Subscribe ``websocket`` to the channel of ``user_id``, leaving any previous one."""

        membership = self._memberships.setdefault(websocket, _Membership())
        if membership.user_channel is not None:
            self._leave(membership.user_channel, websocket)
        channel = user_channel(str(user_id))
        self._channels[channel].add(websocket)
        membership.user_channel = channel
        membership.role = role.lower() if role else None
        return channel

    def join_admin(self, websocket: WebSocket) -> str:
        membership = self._memberships.setdefault(websocket, _Membership())
        self._channels[ADMIN_CHANNEL].add(websocket)
        membership.admin = True
        return ADMIN_CHANNEL

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove ``websocket`` from every channel it joined."""

        membership = self._memberships.pop(websocket, None)
        if membership is None:
            return
        if membership.user_channel is not None:
            self._leave(membership.user_channel, websocket)
        if membership.admin:
            self._leave(ADMIN_CHANNEL, websocket)

    def channel_size(self, channel: str) -> int:
        return len(self._channels.get(channel, ()))

    async def send_to_channel(self, channel: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every socket on ``channel``; return how many got it."""

        delivered = 0
        for connection in list(self._channels.get(channel, set())):
            if await self._send(connection, message):
                delivered += 1
        return delivered

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> int:
        return await self.send_to_channel(user_channel(str(user_id)), message)

    async def send_to_admins(self, message: dict[str, Any]) -> int:
        return await self.send_to_channel(ADMIN_CHANNEL, message)

    async def broadcast(
        self, message: dict[str, Any], *, roles: Collection[str] | None = None
    ) -> int:
        """Send ``message`` to every joined user, optionally only to ``roles``."""

        delivered = 0
        for connection, membership in list(self._memberships.items()):
            if membership.user_channel is None:
                continue
            if roles is not None and membership.role not in roles:
                continue
            if await self._send(connection, message):
                delivered += 1
        return delivered

    async def _send(self, connection: WebSocket, message: dict[str, Any]) -> bool:
        try:
            await connection.send_json(message)
        except Exception:  # pragma: no cover - socket already gone
            logger.debug("Dropping websocket after failed send", exc_info=True)
            self.disconnect(connection)
            return False
        return True

    def _leave(self, channel: str, websocket: WebSocket) -> None:
        connections = self._channels.get(channel)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._channels.pop(channel, None)


__all__ = ["ADMIN_CHANNEL", "LivePushGateway", "USER_CHANNEL_PREFIX", "user_channel"]
