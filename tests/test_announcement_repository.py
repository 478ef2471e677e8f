"""Tests for announcement persistence and the per-user ledgers."""

from __future__ import annotations

import threading

import pytest
from sqlalchemy.exc import OperationalError

from conftest import make_announcement
from important_info.domain.entities import Attachment
from important_info.domain.exceptions import (
    AnnouncementNotFoundError,
    AnnouncementValidationError,
    StorageError,
)
from important_info.infrastructure.repositories import AnnouncementRepository


def test_create_assigns_id_and_trims_title(session):
    repository = AnnouncementRepository(session)

    stored = repository.create(make_announcement("students", "u-1", title="  Closing hours  "))

    assert stored.id
    assert stored.title == "Closing hours"
    assert stored.selector.tokens() == ["students", "u-1"]
    assert stored.created_at is not None
    assert stored.created_at == stored.updated_at
    assert stored.read_by == [] and stored.deleted_for == []


@pytest.mark.parametrize(("title", "body"), [("", "body"), ("   ", "body"), ("title", "  ")])
def test_create_rejects_empty_content(session, title, body):
    with pytest.raises(AnnouncementValidationError):
        AnnouncementRepository(session).create(make_announcement(title=title, body=body))


def test_attachments_round_trip(session):
    announcement = make_announcement()
    announcement.attachments = [
        Attachment(
            filename="attachment-1.pdf",
            original_name="rules.pdf",
            content_ref="http://testserver/uploads/pdf/attachment-1.pdf",
            kind="pdf",
            size_bytes=1024,
            storage_path="file:pdf/attachment-1.pdf",
        ),
        Attachment(
            filename="attachment-2.png",
            original_name="map.png",
            content_ref="http://testserver/uploads/images/attachment-2.png",
            kind="image",
            size_bytes=2048,
            storage_path="file:images/attachment-2.png",
        ),
    ]
    repository = AnnouncementRepository(session)

    stored = repository.create(announcement)
    loaded = repository.get(stored.id)

    assert loaded is not None
    assert [attachment.original_name for attachment in loaded.attachments] == ["rules.pdf", "map.png"]
    assert loaded.attachments[0] == announcement.attachments[0]


def test_mark_read_twice_records_a_single_entry(session):
    repository = AnnouncementRepository(session)
    stored = repository.create(make_announcement())

    assert repository.mark_read(stored.id, "u1") is True
    assert repository.mark_read(stored.id, "u1") is False

    loaded = repository.get(stored.id)
    assert [entry.user_id for entry in loaded.read_by] == ["u1"]
    assert loaded.is_read_by("u1")
    assert loaded.updated_at >= loaded.created_at


def test_soft_delete_is_per_user_and_idempotent(session):
    repository = AnnouncementRepository(session)
    stored = repository.create(make_announcement())

    assert repository.soft_delete_for(stored.id, "u1") is True
    assert repository.soft_delete_for(stored.id, "u1") is False

    loaded = repository.get(stored.id)
    assert loaded.is_deleted_for("u1")
    assert not loaded.is_deleted_for("u2")
    assert repository.deleted_user_ids(stored.id) == {"u1"}


def test_ledger_operations_on_unknown_announcement_raise_not_found(session):
    repository = AnnouncementRepository(session)

    with pytest.raises(AnnouncementNotFoundError):
        repository.mark_read("missing", "u1")
    with pytest.raises(AnnouncementNotFoundError):
        repository.soft_delete_for("missing", "u1")
    with pytest.raises(AnnouncementNotFoundError):
        repository.purge("missing")


def test_concurrent_reads_by_the_same_user_store_one_entry(session_factory, session):
    stored = AnnouncementRepository(session).create(make_announcement())
    barrier = threading.Barrier(2)
    results: list[bool] = []
    errors: list[BaseException] = []

    def _read() -> None:
        worker_session = session_factory()
        try:
            barrier.wait()
            results.append(AnnouncementRepository(worker_session).mark_read(stored.id, "u1"))
        except BaseException as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)
        finally:
            worker_session.close()

    threads = [threading.Thread(target=_read) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert sorted(results) == [False, True]
    assert AnnouncementRepository(session).read_user_ids(stored.id) == {"u1"}


def test_purge_removes_the_record_and_its_ledgers(session):
    repository = AnnouncementRepository(session)
    stored = repository.create(make_announcement())
    repository.mark_read(stored.id, "u1")
    repository.soft_delete_for(stored.id, "u2")

    removed = repository.purge(stored.id)

    assert removed.id == stored.id
    assert repository.get(stored.id) is None
    assert repository.read_user_ids(stored.id) == set()
    assert repository.deleted_user_ids(stored.id) == set()


def test_set_fan_out_status(session):
    repository = AnnouncementRepository(session)
    stored = repository.create(make_announcement())

    repository.set_fan_out_status(stored.id, "complete", recipient_count=3)

    loaded = repository.get(stored.id)
    assert loaded.fan_out_status == "complete"
    assert loaded.recipient_count == 3


def _fail_flushes(monkeypatch, session, failures: int) -> list[int]:
    """Make the next ``failures`` flushes raise a transient database error."""

    calls: list[int] = []
    original_flush = session.flush

    def flush(*args, **kwargs):
        calls.append(1)
        if len(calls) <= failures:
            raise OperationalError("INSERT INTO announcement_reads", {}, Exception("database is locked"))
        return original_flush(*args, **kwargs)

    monkeypatch.setattr(session, "flush", flush)
    return calls


def test_ledger_append_retries_once_after_a_transient_error(session, monkeypatch):
    repository = AnnouncementRepository(session)
    stored = repository.create(make_announcement("students"))
    calls = _fail_flushes(monkeypatch, session, failures=1)

    assert repository.mark_read(stored.id, "u1") is True

    assert len(calls) >= 2
    assert repository.read_user_ids(stored.id) == {"u1"}


def test_ledger_append_gives_up_after_the_second_failure(session, monkeypatch):
    repository = AnnouncementRepository(session)
    stored = repository.create(make_announcement("students"))
    calls = _fail_flushes(monkeypatch, session, failures=2)

    with pytest.raises(StorageError):
        repository.soft_delete_for(stored.id, "u1")

    assert len(calls) == 2
    monkeypatch.undo()
    assert repository.deleted_user_ids(stored.id) == set()
