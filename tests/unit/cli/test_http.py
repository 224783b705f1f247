"""Tests for the CLI's HTTP helpers."""

import httpx
import pytest

from datareg.cli.util import http
from datareg.cli.util.http import api_request, get_actor, with_retry


class TestWithRetry:
    def test_returns_first_success(self, monkeypatch):
        monkeypatch.setattr(http.time, "sleep", lambda s: None)
        calls = iter([httpx.ConnectError("down"), "ok"])

        def flaky():
            result = next(calls)
            if isinstance(result, Exception):
                raise result
            return result

        assert with_retry(flaky, exceptions=(httpx.ConnectError,)) == "ok"

    def test_raises_last_error(self, monkeypatch):
        monkeypatch.setattr(http.time, "sleep", lambda s: None)

        def always_down():
            raise httpx.ConnectError("down")

        with pytest.raises(httpx.ConnectError):
            with_retry(always_down, retries=2, exceptions=(httpx.ConnectError,))


def test_get_actor_prefers_option(monkeypatch):
    monkeypatch.setenv("DATAREG_ACTOR", "from-env")
    assert get_actor("alice") == "alice"
    assert get_actor() == "from-env"
    monkeypatch.delenv("DATAREG_ACTOR")
    assert get_actor() is None


class TestApiRequest:
    def test_sends_actor_header(self, monkeypatch):
        seen = {}

        def fake_request(method, url, headers=None, **kwargs):
            seen.update(method=method, url=url, headers=headers)
            return httpx.Response(200, json={"id": 0}, request=httpx.Request(method, url))

        monkeypatch.setenv("DATAREG_SERVER", "http://registry.test")
        monkeypatch.setattr(http.httpx, "request", fake_request)

        assert api_request("POST", "/datasets", actor="alice", json={}) == {"id": 0}
        assert seen["url"] == "http://registry.test/api/v1/datasets"
        assert seen["headers"] == {"X-Actor-Id": "alice"}

    def test_error_response_exits(self, monkeypatch):
        def fake_request(method, url, headers=None, **kwargs):
            return httpx.Response(
                403, json={"code": "NOT_OWNER", "message": "not yours"},
                request=httpx.Request(method, url),
            )

        monkeypatch.setattr(http.httpx, "request", fake_request)

        with pytest.raises(SystemExit) as exc_info:
            api_request("PUT", "/datasets/0/visibility", actor="bob", json={"is_public": True})
        assert exc_info.value.code == 1
