"""HTTP client for the external user directory that owns the user roster."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from important_info.config import get_settings
from important_info.domain.entities import ROLE_STUDENT, DirectoryUser
from important_info.domain.exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)

USERS_PATH = "/api/auth/users"


class DirectoryClient:
    """Fetch the user roster, forwarding the caller's bearer credential.

    Every failure (missing configuration, transport errors, timeouts, non-2xx
    answers, malformed payloads) surfaces as :class:`UpstreamUnavailableError`.
    ``timeout`` bounds the whole call, not only each network step: the body
    is streamed and abandoned once the deadline passes.
    """

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def list_users(self, credential: str | None) -> list[DirectoryUser]:
        """Return every user known to the directory."""

        if not self._base_url:
            raise UpstreamUnavailableError("The user directory URL is not configured")
        if not credential:
            raise UpstreamUnavailableError("No credential available for the user directory")

        deadline = time.monotonic() + self._timeout
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                with client.stream(
                    "GET",
                    f"{self._base_url}{USERS_PATH}",
                    headers={"Authorization": f"Bearer {credential}"},
                ) as response:
                    if response.status_code >= 400:
                        logger.warning(
                            "User directory answered with HTTP %s", response.status_code
                        )
                        raise UpstreamUnavailableError(
                            f"The user directory answered with HTTP {response.status_code}"
                        )
                    body = self._read_before(response, deadline)
        except httpx.TimeoutException as exc:
            logger.warning("User directory timed out after %.1fs", self._timeout)
            raise UpstreamUnavailableError("The user directory timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("User directory request failed: %s", exc)
            raise UpstreamUnavailableError("The user directory is unreachable") from exc

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise UpstreamUnavailableError("The user directory returned non-JSON content") from exc

        return parse_directory_payload(payload)

    def _read_before(self, response: httpx.Response, deadline: float) -> bytes:
        chunks: list[bytes] = []
        for chunk in response.iter_bytes():
            chunks.append(chunk)
            if time.monotonic() > deadline:
                logger.warning(
                    "User directory response still incomplete after %.1fs", self._timeout
                )
                raise UpstreamUnavailableError("The user directory timed out")
        return b"".join(chunks)


def parse_directory_payload(payload: Any) -> list[DirectoryUser]:
    """Extract ``{id, role}`` pairs from a ``{success, users}`` payload."""

    if not isinstance(payload, dict) or not payload.get("success"):
        raise UpstreamUnavailableError("The user directory reported a failure")

    raw_users = payload.get("users") or []
    if not isinstance(raw_users, list):
        raise UpstreamUnavailableError("The user directory returned an invalid roster")

    users: list[DirectoryUser] = []
    for raw in raw_users:
        if not isinstance(raw, dict):
            continue
        user_id = raw.get("id") or raw.get("_id") or raw.get("userId")
        if user_id in (None, ""):
            logger.debug("Skipping directory entry without id: %s", raw)
            continue
        role = str(raw.get("role") or ROLE_STUDENT).lower()
        users.append(DirectoryUser(id=str(user_id), role=role))
    return users


def get_directory_client() -> DirectoryClient:
    """Return a client configured from the application settings."""

    settings = get_settings()
    return DirectoryClient(
        settings.directory_base_url, timeout=settings.directory_timeout_seconds
    )


__all__ = ["DirectoryClient", "USERS_PATH", "get_directory_client", "parse_directory_payload"]
