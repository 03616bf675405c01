from __future__ import annotations

import pytest

from wikidata_publish.common.http import HttpClient, HttpRequestError, RetryConfig, RetryableHttpError


class FakeResponse:
    def __init__(self, status_code: int, payload=None, raises_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._raises_json = raises_json

    def json(self):
        if self._raises_json:
            raise ValueError("bad json")
        return self._payload


def test_http_get_json_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, {"ok": True}))
    payload = client.get_json("https://example.com")

    assert payload == {"ok": True}


def test_http_retryable_status_raises_retryable_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(503, {"x": 1}))

    with pytest.raises(RetryableHttpError):
        client.get_json("https://example.com")


def test_http_client_error_is_not_retryable(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.0, max_wait=0))
    calls = []

    def _request(**kwargs):
        calls.append(kwargs)
        return FakeResponse(404, {})

    monkeypatch.setattr(client.session, "request", _request)

    with pytest.raises(HttpRequestError) as excinfo:
        client.get_json("https://example.com")
    assert not isinstance(excinfo.value, RetryableHttpError)
    assert excinfo.value.status_code == 404
    assert len(calls) == 1


def test_http_invalid_json_raises(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, raises_json=True))

    with pytest.raises(HttpRequestError):
        client.get_json("https://example.com")


def test_http_get_retries_retryable_status(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=2, multiplier=0.0, max_wait=0))
    responses = [FakeResponse(502, {}), FakeResponse(200, {"ok": True})]
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: responses.pop(0))

    assert client.get_json("https://example.com") == {"ok": True}


def test_post_form_json_sends_form_headers_and_user_agent(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1), user_agent="test-agent/1.0")
    seen = {}

    def _request(**kwargs):
        seen.update(kwargs)
        return FakeResponse(200, {"ok": True})

    monkeypatch.setattr(client.session, "request", _request)
    client.post_form_json("https://example.com/w/api.php", data={"action": "wbeditentity"})

    assert seen["method"] == "POST"
    assert seen["data"] == {"action": "wbeditentity"}
    assert seen["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
    assert seen["headers"]["User-Agent"] == "test-agent/1.0"
    assert seen["timeout"] == (10.0, 60.0)
