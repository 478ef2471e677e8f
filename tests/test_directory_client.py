"""Tests for the user directory HTTP client."""

import time

import httpx
import pytest

from important_info.domain.entities import DirectoryUser
from important_info.domain.exceptions import UpstreamUnavailableError
from important_info.infrastructure.directory import (
    USERS_PATH,
    DirectoryClient,
    parse_directory_payload,
)


def _client(handler) -> DirectoryClient:
    return DirectoryClient(
        "http://directory.test/", timeout=2.0, transport=httpx.MockTransport(handler)
    )


def test_list_users_forwards_the_credential():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["authorization"] = request.headers.get("Authorization")
        return httpx.Response(
            200,
            json={
                "success": True,
                "users": [
                    {"_id": "64f1", "role": "Student"},
                    {"id": 7, "role": "admin"},
                    {"userId": "u-3"},
                    {"name": "no id"},
                ],
            },
        )

    users = _client(handler).list_users("abc")

    assert seen == {
        "url": f"http://directory.test{USERS_PATH}",
        "authorization": "Bearer abc",
    }
    assert users == [
        DirectoryUser(id="64f1", role="student"),
        DirectoryUser(id="7", role="admin"),
        DirectoryUser(id="u-3", role="student"),
    ]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"success": False}),
        httpx.Response(401, json={"message": "expired"}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"success": False, "users": []}),
        httpx.Response(200, json={"success": True, "users": {"id": 1}}),
    ],
)
def test_bad_answers_raise_upstream_unavailable(response):
    with pytest.raises(UpstreamUnavailableError):
        _client(lambda request: response).list_users("abc")


def test_timeouts_raise_upstream_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(UpstreamUnavailableError):
        _client(handler).list_users("abc")


def test_connection_errors_raise_upstream_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamUnavailableError):
        _client(handler).list_users("abc")


def test_missing_configuration_or_credential():
    with pytest.raises(UpstreamUnavailableError):
        DirectoryClient(None).list_users("abc")
    with pytest.raises(UpstreamUnavailableError):
        DirectoryClient("http://directory.test").list_users(None)


def test_parse_directory_payload_accepts_empty_roster():
    assert parse_directory_payload({"success": True, "users": []}) == []


def test_slow_body_is_abandoned_at_the_overall_deadline():
    def trickle():
        for _ in range(40):
            time.sleep(0.05)
            yield b" "
        yield b'{"success": true, "users": [{"id": "u1", "role": "student"}]}'

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=trickle())

    client = DirectoryClient(
        "http://directory.test", timeout=0.3, transport=httpx.MockTransport(handler)
    )
    started = time.monotonic()

    with pytest.raises(UpstreamUnavailableError):
        client.list_users("abc")

    assert time.monotonic() - started < 1.5


def test_body_within_the_deadline_is_parsed():
    def chunks():
        yield b'{"success": true, '
        yield b'"users": [{"id": "u1", "role": "admin"}]}'

    client = _client(lambda request: httpx.Response(200, content=chunks()))

    assert client.list_users("abc") == [DirectoryUser(id="u1", role="admin")]
