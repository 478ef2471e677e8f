"""Shared fixtures: environment, throwaway SQLite databases and test doubles."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Iterable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_ROOT = Path(tempfile.mkdtemp(prefix="important_info_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_ROOT / 'api.db'}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["UPLOAD_DIR"] = str(TEST_ROOT / "uploads")
os.environ["DIRECTORY_BASE_URL"] = "http://directory.test"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ.pop("AZURE_STORAGE_CONNECTION_STRING", None)
os.environ.pop("AZURE_STORAGE_CONTAINER_NAME", None)

from important_info.config import get_settings  # noqa: E402

get_settings.cache_clear()

from important_info.application.use_cases.announcements import FanOutOrchestrator  # noqa: E402
from important_info.config import Settings  # noqa: E402
from important_info.domain.entities import (  # noqa: E402
    Announcement,
    AnnouncementSender,
    DirectoryUser,
    RecipientSelector,
)
from important_info.domain.exceptions import UpstreamUnavailableError  # noqa: E402
from important_info.infrastructure.database import (  # noqa: E402
    build_engine,
    build_session_factory,
    initialize_database,
)
from important_info.infrastructure.storage import AttachmentStorage  # noqa: E402

ADMIN_SENDER = AnnouncementSender(id="admin-1", name="Admin", email="admin@example.com", role="admin")


class RecordingPublisher:
    """Stand-in for :class:`LivePushPublisher` that keeps every event."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any, str, dict]] = []

    def to_user(self, user_id: str, event_type: str, payload: dict) -> None:
        self.events.append(("user", str(user_id), event_type, dict(payload)))

    def to_users(self, user_ids: Iterable[str], event_type: str, payload: dict) -> int:
        distinct = list(dict.fromkeys(str(user_id) for user_id in user_ids))
        for user_id in distinct:
            self.to_user(user_id, event_type, payload)
        return len(distinct)

    def to_admins(self, event_type: str, payload: dict) -> None:
        self.events.append(("admin", None, event_type, dict(payload)))

    def broadcast(self, event_type: str, payload: dict, *, roles=None) -> None:
        target = None if roles is None else frozenset(roles)
        self.events.append(("broadcast", target, event_type, dict(payload)))

    def of_type(self, event_type: str) -> list[tuple[str, Any, str, dict]]:
        return [event for event in self.events if event[2] == event_type]

    def users_notified(self, event_type: str) -> list[str]:
        return [event[1] for event in self.events if event[0] == "user" and event[2] == event_type]


class FakeDirectory:
    """Directory client double returning a fixed roster or failing."""

    def __init__(self, users: Iterable[DirectoryUser] = (), *, error: str | None = None) -> None:
        self.users = list(users)
        self.error = error
        self.credentials: list[str | None] = []

    def list_users(self, credential: str | None) -> list[DirectoryUser]:
        self.credentials.append(credential)
        if self.error:
            raise UpstreamUnavailableError(self.error)
        return list(self.users)


def make_announcement(
    *tokens: str,
    title: str = "Exam schedule",
    body: str = "The final exams start on Monday.",
    urgent: bool = False,
) -> Announcement:
    return Announcement(
        id=None,
        title=title,
        body=body,
        sender=ADMIN_SENDER,
        urgent=urgent,
        selector=RecipientSelector.from_tokens(tokens or None),
    )


@pytest.fixture()
def engine(tmp_path):
    """File backed SQLite database so several sessions see the same data."""

    db_engine = build_engine(f"sqlite:///{tmp_path / 'important_info.db'}")
    initialize_database(bind=db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def directory() -> FakeDirectory:
    return FakeDirectory(
        [
            DirectoryUser(id="u1", role="student"),
            DirectoryUser(id="u2", role="student"),
            DirectoryUser(id="a1", role="admin"),
        ]
    )


@pytest.fixture()
def orchestrator(session_factory, directory, publisher) -> FanOutOrchestrator:
    return FanOutOrchestrator(session_factory, directory=directory, publisher=publisher)


@pytest.fixture()
def storage(tmp_path) -> AttachmentStorage:
    """Local disk storage with a small size limit."""

    settings = Settings(
        database_url="sqlite://",
        secret_key="test-secret",
        upload_dir=str(tmp_path / "uploads"),
        public_base_url="http://files.test/",
        max_attachment_bytes=1024,
        azure_storage_connection_string=None,
        azure_storage_container_name=None,
    )
    return AttachmentStorage(settings)
