"""Aggregate application use cases."""

from .recipients import explicit_recipients, resolve_recipients
from .visibility import (
    count_unread,
    get_visible_announcement,
    is_read,
    is_visible,
    list_visible,
)

__all__ = [
    "explicit_recipients",
    "resolve_recipients",
    "count_unread",
    "get_visible_announcement",
    "is_read",
    "is_visible",
    "list_visible",
]
