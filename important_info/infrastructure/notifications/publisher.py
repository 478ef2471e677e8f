"""Schedule live-push events onto the gateway from sync or async code."""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Awaitable, Callable, Collection, Iterable, Set

from anyio import from_thread

from .manager import LivePushGateway

logger = logging.getLogger(__name__)


class LivePushPublisher:
    """Serialize events as ``{"type", "data"}`` messages and schedule delivery.

    Request handlers and background tasks run in the worker thread pool, so
    delivery is handed back to the event loop through :mod:`anyio.from_thread`.
    The worker only waits for the send to be spawned on the loop, never for
    the socket itself. Without any loop the event is dropped.
    """

    def __init__(self, gateway: LivePushGateway) -> None:
        self._gateway = gateway
        self._tasks: Set[asyncio.Task] = set()

    @property
    def gateway(self) -> LivePushGateway:
        return self._gateway

    def to_user(self, user_id: str, event_type: str, payload: dict[str, Any]) -> None:
        if not user_id:
            return
        self._schedule(self._gateway.send_to_user, str(user_id), _message(event_type, payload))

    def to_users(
        self, user_ids: Iterable[str], event_type: str, payload: dict[str, Any]
    ) -> int:
        """Send the same event to each distinct user; return how many were scheduled."""

        seen: Set[str] = set()
        for user_id in user_ids:
            if not user_id or str(user_id) in seen:
                continue
            seen.add(str(user_id))
            self.to_user(str(user_id), event_type, payload)
        return len(seen)

    def to_admins(self, event_type: str, payload: dict[str, Any]) -> None:
        self._schedule(self._gateway.send_to_admins, _message(event_type, payload))

    def broadcast(
        self,
        event_type: str,
        payload: dict[str, Any],
        *,
        roles: Collection[str] | None = None,
    ) -> None:
        message = _message(event_type, payload)
        self._schedule(lambda: self._gateway.broadcast(message, roles=roles))

    def _schedule(self, send: Callable[..., Awaitable[Any]], *args: Any) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run_sync(self._spawn, send, args)
            except RuntimeError:
                logger.debug("No event loop available; live event dropped")
        else:
            self._spawn(send, args)

    def _spawn(self, send: Callable[..., Awaitable[Any]], args: tuple[Any, ...]) -> None:
        task = asyncio.get_running_loop().create_task(send(*args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


def _message(event_type: str, payload: dict[str, Any]) -> dict[str, Any]:
    return {"type": event_type, "data": copy.deepcopy(payload)}


__all__ = ["LivePushPublisher"]
