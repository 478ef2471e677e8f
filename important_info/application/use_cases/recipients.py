"""Expand a recipient selector into concrete user ids."""

from __future__ import annotations

from typing import Iterable

from important_info.domain.entities import DirectoryUser, RecipientSelector


def resolve_recipients(
    selector: RecipientSelector, directory: Iterable[DirectoryUser]
) -> set[str]:
    """Return the ids addressed by ``selector`` given a directory snapshot.

    ``all`` yields every id in the snapshot and shadows explicit ids. Role
    targets pick users by role. Explicit ids are taken as-is, so they resolve
    even when the snapshot is empty. An empty result is a valid outcome.
    """

    users = list(directory)
    if selector.includes_all:
        return {user.id for user in users}

    recipients = set(selector.user_ids)
    roles = selector.roles
    if roles:
        recipients.update(user.id for user in users if user.role in roles)
    return recipients


def explicit_recipients(selector: RecipientSelector) -> set[str]:
    """Ids that can be materialized without asking the directory."""

    if selector.includes_all:
        return set()
    return set(selector.user_ids)


__all__ = ["resolve_recipients", "explicit_recipients"]
