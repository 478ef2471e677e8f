"""Live-push helpers for the infrastructure layer."""

from .manager import ADMIN_CHANNEL, LivePushGateway, USER_CHANNEL_PREFIX, user_channel
from .publisher import LivePushPublisher

__all__ = [
    "ADMIN_CHANNEL",
    "LivePushGateway",
    "USER_CHANNEL_PREFIX",
    "user_channel",
    "LivePushPublisher",
]
