"""Recipient selector attached to every announcement.

A selector is an ordered union of targets. The raw tokens accepted from
clients (``all``, ``students``, ``admins`` or a user id) are normalized once
into the tagged variants below; the rest of the code never interprets raw
tokens again.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final, Iterable, Union

from important_info.domain.exceptions import AnnouncementValidationError

ALL_TOKEN: Final[str] = "all"
ROLE_TOKENS: Final[dict[str, str]] = {"students": "student", "admins": "admin"}
_TOKENS_BY_ROLE: Final[dict[str, str]] = {role: token for token, role in ROLE_TOKENS.items()}
_USER_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:@-]{0,63}$")


@dataclass(frozen=True)
class AllRecipients:
    """Every user known to the directory."""

    kind: str = field(default="all", init=False)

    @property
    def token(self) -> str:
        return ALL_TOKEN


@dataclass(frozen=True)
class RoleRecipients:
    """Every user holding ``role`` (``student`` or ``admin``)."""

    role: str
    kind: str = field(default="role", init=False)

    @property
    def token(self) -> str:
        return _TOKENS_BY_ROLE[self.role]


@dataclass(frozen=True)
class UserRecipient:
    """A single user addressed by id; needs no directory lookup."""

    user_id: str
    kind: str = field(default="user", init=False)

    @property
    def token(self) -> str:
        return self.user_id


RecipientTarget = Union[AllRecipients, RoleRecipients, UserRecipient]


@dataclass(frozen=True)
class RecipientSelector:
    """Ordered, duplicate free union of recipient targets."""

    targets: tuple[RecipientTarget, ...] = (AllRecipients(),)

    @classmethod
    def from_tokens(cls, tokens: Iterable[str] | None) -> "RecipientSelector":
        """Normalize raw client tokens, defaulting to ``all`` when none are given."""

        targets: list[RecipientTarget] = []
        for raw in tokens or ():
            target = parse_token(raw)
            if target not in targets:
                targets.append(target)
        if not targets:
            return cls()
        return cls(tuple(targets))

    @classmethod
    def from_targets(cls, targets: Iterable[RecipientTarget]) -> "RecipientSelector":
        unique: list[RecipientTarget] = []
        for target in targets:
            if target not in unique:
                unique.append(target)
        return cls(tuple(unique)) if unique else cls()

    @property
    def includes_all(self) -> bool:
        return any(isinstance(target, AllRecipients) for target in self.targets)

    @property
    def roles(self) -> frozenset[str]:
        return frozenset(
            target.role for target in self.targets if isinstance(target, RoleRecipients)
        )

    @property
    def user_ids(self) -> frozenset[str]:
        return frozenset(
            target.user_id for target in self.targets if isinstance(target, UserRecipient)
        )

    @property
    def needs_directory(self) -> bool:
        """Whether resolving this selector requires the user directory."""

        return self.includes_all or bool(self.roles)

    def tokens(self) -> list[str]:
        return [target.token for target in self.targets]

    def matches(self, user_id: str, role: str | None) -> bool:
        """Return ``True`` when the selector addresses ``user_id`` with ``role``."""

        if self.includes_all:
            return True
        if role is not None and role.lower() in self.roles:
            return True
        return str(user_id) in self.user_ids


def parse_token(raw: str) -> RecipientTarget:
    """Turn a single raw token into its tagged target."""

    if not isinstance(raw, str):
        raw = str(raw)
    token = raw.strip()
    if not token:
        raise AnnouncementValidationError("Recipient tokens cannot be empty")

    lowered = token.lower()
    if lowered == ALL_TOKEN:
        return AllRecipients()
    if lowered in ROLE_TOKENS:
        return RoleRecipients(ROLE_TOKENS[lowered])
    if not _USER_ID_PATTERN.match(token):
        raise AnnouncementValidationError(f"Invalid recipient token: {token!r}")
    return UserRecipient(token)


__all__ = [
    "ALL_TOKEN",
    "ROLE_TOKENS",
    "AllRecipients",
    "RoleRecipients",
    "UserRecipient",
    "RecipientTarget",
    "RecipientSelector",
    "parse_token",
]
