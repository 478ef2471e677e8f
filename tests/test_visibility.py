"""Tests for the visibility and unread queries."""

from __future__ import annotations

import pytest

from conftest import make_announcement
from important_info.application.use_cases.visibility import (
    count_unread,
    get_visible_announcement,
    is_read,
    is_visible,
    list_visible,
)
from important_info.domain.exceptions import AnnouncementNotFoundError
from important_info.infrastructure.repositories import AnnouncementRepository
from important_info.utils import PageRequest

USERS = [("u1", "student"), ("u2", "student"), ("a1", "admin"), ("u-77", "student")]


def _all_visible_ids(session, user_id: str, role: str) -> set[str]:
    page = list_visible(
        session, user_id=user_id, role=role, page_request=PageRequest(page=1, page_size=100)
    )
    return {item.announcement.id for item in page.items}


def test_soft_delete_hides_only_for_that_user(session):
    repository = AnnouncementRepository(session)
    stored = repository.create(make_announcement("all"))

    repository.soft_delete_for(stored.id, "u1")
    repository.mark_read(stored.id, "u2")
    loaded = repository.get(stored.id)

    assert not is_visible(loaded, "u1", "student")
    assert is_visible(loaded, "u2", "student")
    assert is_read(loaded, "u2") and not is_read(loaded, "u1")
    assert _all_visible_ids(session, "u1", "student") == set()
    assert _all_visible_ids(session, "u2", "student") == {stored.id}


def test_sql_and_in_memory_visibility_agree(session):
    repository = AnnouncementRepository(session)
    selectors = [("all",), ("students",), ("admins",), ("u-77",), ("admins", "u2"), ("students", "u-77")]
    stored = [repository.create(make_announcement(*tokens)) for tokens in selectors]
    repository.soft_delete_for(stored[0].id, "u2")
    repository.soft_delete_for(stored[1].id, "u-77")
    repository.soft_delete_for(stored[4].id, "a1")

    announcements = [repository.get(item.id) for item in stored]
    for user_id, role in USERS:
        expected = {item.id for item in announcements if is_visible(item, user_id, role)}
        assert _all_visible_ids(session, user_id, role) == expected, user_id


def test_unread_scenario(session):
    repository = AnnouncementRepository(session)
    stored = repository.create(make_announcement("all"))

    assert count_unread(session, user_id="u1", role="student") == 1
    assert count_unread(session, user_id="u2", role="student") == 1

    repository.mark_read(stored.id, "u1")

    assert count_unread(session, user_id="u1", role="student") == 0
    assert count_unread(session, user_id="u2", role="student") == 1


def test_unread_count_ignores_deleted_and_foreign_announcements(session):
    repository = AnnouncementRepository(session)
    deleted = repository.create(make_announcement("students"))
    repository.create(make_announcement("admins"))
    repository.soft_delete_for(deleted.id, "u1")

    assert count_unread(session, user_id="u1", role="student") == 0
    assert count_unread(session, user_id="a1", role="admin") == 1


def test_pagination_of_visible_announcements(session):
    repository = AnnouncementRepository(session)
    for index in range(25):
        repository.create(make_announcement("students", title=f"Notice {index}"))

    page = list_visible(
        session, user_id="u1", role="student", page_request=PageRequest(page=3, page_size=10)
    )

    assert len(page.items) == 5
    assert page.total == 25
    assert page.total_pages == 3
    assert all(item.is_read is False for item in page.items)


def test_visible_listing_is_newest_first_with_read_flag(session):
    repository = AnnouncementRepository(session)
    older = repository.create(make_announcement("all", title="Older"))
    newer = repository.create(make_announcement("all", title="Newer"))
    repository.mark_read(older.id, "u1")

    page = list_visible(
        session, user_id="u1", role="student", page_request=PageRequest(page=1, page_size=10)
    )

    assert [(item.announcement.id, item.is_read) for item in page.items] == [
        (newer.id, False),
        (older.id, True),
    ]


def test_get_visible_announcement(session):
    repository = AnnouncementRepository(session)
    stored = repository.create(make_announcement("admins"))

    visible = get_visible_announcement(
        session, announcement_id=stored.id, user_id="a1", role="admin"
    )
    assert visible.announcement.id == stored.id

    with pytest.raises(AnnouncementNotFoundError):
        get_visible_announcement(session, announcement_id=stored.id, user_id="u1", role="student")
    with pytest.raises(AnnouncementNotFoundError):
        get_visible_announcement(session, announcement_id="missing", user_id="a1", role="admin")
