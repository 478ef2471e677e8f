"""Tests for helper utilities in the API routes."""

import pytest

from important_info.domain.exceptions import AnnouncementValidationError
from important_info.interfaces.api.routes_helpers import (
    parse_bool_flag,
    parse_recipient_tokens,
)


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        (None, []),
        ([], []),
        ([""], []),
        (['["students", "u-1"]'], ["students", "u-1"]),
        (["students,u-1, admins"], ["students", "u-1", " admins"]),
        (["students", "u-1"], ["students", "u-1"]),
        (["[]"], []),
    ],
)
def test_parse_recipient_tokens(values, expected):
    assert parse_recipient_tokens(values) == expected


@pytest.mark.parametrize("value", ["[not json", "[\"students\""])
def test_parse_recipient_tokens_rejects_bad_json(value):
    with pytest.raises(AnnouncementValidationError):
        parse_recipient_tokens([value])


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, False), ("", False), ("false", False), ("true", True), ("1", True), (True, True)],
)
def test_parse_bool_flag(value, expected):
    assert parse_bool_flag(value) is expected
