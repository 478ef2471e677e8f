"""Tests for the notification projection store."""

from conftest import make_announcement
from important_info.domain.entities import Notification
from important_info.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationRepository,
)
from important_info.utils import PageRequest


def _row(recipient_id: str, announcement_id: str, *, is_read: bool = False) -> Notification:
    return Notification(
        id=None,
        recipient_id=recipient_id,
        announcement_id=announcement_id,
        title="New Important Information: Exam schedule",
        is_read=is_read,
    )


def _announcement_id(session) -> str:
    return AnnouncementRepository(session).create(make_announcement()).id


def test_bulk_insert_skips_duplicates(session):
    announcement_id = _announcement_id(session)
    repository = NotificationRepository(session)

    first = repository.bulk_insert([_row("u1", announcement_id), _row("u1", announcement_id)])
    second = repository.bulk_insert([_row("u1", announcement_id), _row("u2", announcement_id)])

    assert (first.inserted, first.skipped, first.failed) == (1, 1, 0)
    assert (second.inserted, second.skipped, second.failed) == (1, 1, 0)
    assert repository.recipient_ids_for(announcement_id) == {"u1", "u2"}


def test_failing_row_does_not_abort_the_batch(session):
    announcement_id = _announcement_id(session)
    repository = NotificationRepository(session)

    result = repository.bulk_insert(
        [
            _row("u1", announcement_id),
            _row("u2", "does-not-exist"),
            _row("u3", announcement_id),
        ]
    )

    assert (result.inserted, result.failed) == (2, 1)
    assert repository.recipient_ids_for(announcement_id) == {"u1", "u3"}


def test_mark_read_is_a_no_op_for_missing_rows(session):
    announcement_id = _announcement_id(session)
    repository = NotificationRepository(session)
    repository.bulk_insert([_row("u1", announcement_id)])

    assert repository.mark_read("u1", announcement_id) is True
    assert repository.mark_read("u2", announcement_id) is False
    assert repository.count_unread("u1") == 0


def test_counts_and_bulk_updates_are_scoped_to_the_recipient(session):
    first = _announcement_id(session)
    second = _announcement_id(session)
    repository = NotificationRepository(session)
    repository.bulk_insert(
        [_row("u1", first), _row("u1", second), _row("u2", first, is_read=True)]
    )

    assert repository.count_unread("u1") == 2
    assert repository.count_unread("u2") == 0

    assert repository.mark_all_read("u1") == 2
    assert repository.count_unread("u1") == 0

    assert repository.delete_all_for_user("u1") == 2
    assert repository.recipient_ids_for(first) == {"u2"}


def test_reconciliation_helpers(session):
    announcement_id = _announcement_id(session)
    repository = NotificationRepository(session)
    repository.bulk_insert([_row(user, announcement_id) for user in ("u1", "u2", "u3")])

    assert repository.mark_read_for_users(announcement_id, {"u1", "u2"}) == 2
    assert repository.delete_for_users(announcement_id, ["u3"]) == 1
    assert repository.count_unread("u1") == 0
    assert repository.recipient_ids_for(announcement_id) == {"u1", "u2"}


def test_list_paged_is_newest_first(session):
    announcement_ids = [_announcement_id(session) for _ in range(3)]
    repository = NotificationRepository(session)
    for announcement_id in announcement_ids:
        repository.bulk_insert([_row("u1", announcement_id)])

    page = repository.list_paged("u1", PageRequest(page=1, page_size=2))

    assert page.total == 3
    assert page.total_pages == 2
    assert [item.announcement_id for item in page.items] == announcement_ids[::-1][:2]


def test_delete_all_for_announcement(session):
    announcement_id = _announcement_id(session)
    repository = NotificationRepository(session)
    repository.bulk_insert([_row("u1", announcement_id), _row("u2", announcement_id)])

    assert repository.delete_all_for_announcement(announcement_id) == 2
    assert repository.recipient_ids_for(announcement_id) == set()
