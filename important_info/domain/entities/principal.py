"""Authenticated caller and directory user entities."""

from dataclasses import dataclass

ROLE_ADMIN = "admin"
ROLE_STUDENT = "student"


@dataclass(frozen=True)
class Principal:
    """Trusted identity extracted from a verified bearer token."""

    id: str
    role: str
    name: str
    email: str | None = None

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the principal's role matches ``alias``."""

        return self.role.lower() == alias.lower()

    def is_admin(self) -> bool:
        return self.has_role(ROLE_ADMIN)


@dataclass(frozen=True)
class DirectoryUser:
    """Entry of the user roster returned by the directory service."""

    id: str
    role: str


__all__ = ["ROLE_ADMIN", "ROLE_STUDENT", "Principal", "DirectoryUser"]
