"""Tests for expanding selectors into concrete recipients."""

from important_info.application.use_cases.recipients import (
    explicit_recipients,
    resolve_recipients,
)
from important_info.domain.entities import DirectoryUser, RecipientSelector

DIRECTORY = [DirectoryUser(id="1", role="student"), DirectoryUser(id="2", role="admin")]


def _resolve(tokens, directory=DIRECTORY):
    return resolve_recipients(RecipientSelector.from_tokens(tokens), directory)


def test_all_resolves_to_every_directory_user():
    assert _resolve(["all"]) == {"1", "2"}


def test_roles_pick_users_by_role():
    assert _resolve(["students"]) == {"1"}
    assert _resolve(["admins"]) == {"2"}
    assert _resolve(["students", "admins"]) == {"1", "2"}


def test_explicit_ids_resolve_without_directory():
    assert _resolve(["u-77"], directory=[]) == {"u-77"}


def test_all_shadows_explicit_ids():
    assert _resolve(["all", "u-77"]) == {"1", "2"}
    assert explicit_recipients(RecipientSelector.from_tokens(["all", "u-77"])) == set()


def test_union_of_roles_and_ids_is_deduplicated():
    assert _resolve(["students", "1", "u-5"]) == {"1", "u-5"}


def test_empty_directory_gives_empty_result_for_role_tokens():
    assert _resolve(["all"], directory=[]) == set()
    assert _resolve(["students"], directory=[]) == set()


def test_explicit_recipients_lists_only_ids():
    selector = RecipientSelector.from_tokens(["students", "u-1", "u-2"])

    assert explicit_recipients(selector) == {"u-1", "u-2"}
