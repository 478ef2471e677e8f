"""Tests for the timezone helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from important_info.utils import ensure_app_naive_datetime, ensure_app_timezone
from important_info.utils.datetime import _fixed_offset


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("UTC-05:00", timedelta(hours=-5)),
        ("gmt+2", timedelta(hours=2)),
        ("UTC+0530", timedelta(hours=5, minutes=30)),
    ],
)
def test_fixed_offsets(name, expected):
    assert _fixed_offset(name).utcoffset(None) == expected


def test_unknown_names_are_not_offsets():
    assert _fixed_offset("Mars/Olympus") is None


def test_naive_storage_round_trip_uses_the_app_zone():
    aware = datetime(2024, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

    stored = ensure_app_naive_datetime(aware)

    assert stored == datetime(2024, 3, 1, 10, 0)
    assert ensure_app_timezone(stored) == aware
    assert ensure_app_naive_datetime(None) is None
