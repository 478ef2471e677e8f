"""Clock and timezone helpers used for announcement and ledger timestamps."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from important_info.config import get_settings

_FALLBACK_ZONE: Final[str] = "UTC"
_UTC_OFFSET: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Zone named by ``APP_TIMEZONE``.

    IANA names (``Europe/Madrid``) and fixed offsets (``UTC-05:00``,
    ``GMT+2``) are understood. Unknown names mean UTC.
    """

    name = (get_settings().app_timezone or "").strip() or _FALLBACK_ZONE
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        return _fixed_offset(name) or timezone.utc


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Wall-clock time in the app zone, as stored in the database columns."""

    return now_in_app_timezone().replace(tzinfo=None)


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Attach or convert to the app zone; naive values are taken as app-local."""

    if value is None:
        return None
    zone = get_app_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Convert to app-local wall-clock time and drop ``tzinfo`` for storage.

    Repositories write naive values and re-attach the zone with
    :func:`ensure_app_timezone` when reading them back.
    """

    local = ensure_app_timezone(value)
    return None if local is None else local.replace(tzinfo=None)


def _fixed_offset(name: str) -> tzinfo | None:
    match = _UTC_OFFSET.match(name)
    if match is None:
        return None
    offset = timedelta(hours=int(match.group("hours")), minutes=int(match.group("minutes") or 0))
    if match.group("sign") == "-":
        offset = -offset
    return timezone(offset)
