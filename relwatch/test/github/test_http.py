"""Tests for relwatch.github.http module."""

from __future__ import annotations

import http.client
import urllib.request

import pytest

from relwatch.core.result import Err, Ok
from relwatch.github.http import (
    HttpClient,
    HttpError,
    MockHttpClient,
    RealHttpClient,
    decode_array,
    decode_object,
)


class TestHttpError:
    def test_str_with_status(self) -> None:
        error = HttpError(url="https://x/y", status=404, message="Not Found")
        assert str(error) == "GET https://x/y: 404 Not Found"
        assert error.is_not_found

    def test_str_without_response(self) -> None:
        error = HttpError(url="https://x/y", status=0, message="timed out after 30.0s")
        assert str(error) == "GET https://x/y: timed out after 30.0s"
        assert not error.is_not_found


class TestDecoding:
    def test_object(self) -> None:
        assert decode_object("u", '{"a": 1}') == Ok({"a": 1})

    def test_object_rejects_array(self) -> None:
        result = decode_object("u", "[]")
        assert isinstance(result, Err)
        assert result.error.message == "expected a JSON object"

    def test_array(self) -> None:
        assert decode_array("u", '[1, "a"]') == Ok([1, "a"])

    def test_invalid_json(self) -> None:
        result = decode_array("u", "<html>")
        assert isinstance(result, Err)
        assert result.error.status == 0
        assert result.error.message.startswith("invalid JSON")


class TestRealHttpClient:
    def test_auth_header(self) -> None:
        client = RealHttpClient("secret")
        assert client._headers["Authorization"] == "Bearer secret"
        assert client._headers["Accept"] == "application/vnd.github+json"
        assert client._headers["User-Agent"].startswith("relwatch/")

    def test_no_token_no_auth_header(self) -> None:
        assert "Authorization" not in RealHttpClient()._headers

    def test_satisfies_protocol(self) -> None:
        assert isinstance(RealHttpClient(), HttpClient)

    def test_truncated_body_is_an_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_urlopen(*args: object, **kwargs: object) -> object:
            raise http.client.IncompleteRead(b"partial")

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient().get_text("https://api.github.com/repos/o/r/pulls/1")

        assert isinstance(result, Err)
        assert result.error.status == 0
        assert result.error.message.startswith("IncompleteRead")


class TestMockHttpClient:
    def test_unknown_url_is_404(self) -> None:
        result = MockHttpClient().get_json("https://x")
        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_canned_bodies(self) -> None:
        http = MockHttpClient()
        http.respond("https://x/j", {"a": 1})
        http.respond("https://x/t", "[]")
        http.respond("https://x/e", HttpError(url="https://x/e", status=500, message="boom"))

        assert http.get_json("https://x/j") == Ok({"a": 1})
        assert http.get_text("https://x/t") == Ok("[]")
        err = http.get_text("https://x/e")
        assert isinstance(err, Err)
        assert err.error.status == 500
        assert http.requested == ["https://x/j", "https://x/t", "https://x/e"]

    def test_get_json_on_non_object(self) -> None:
        http = MockHttpClient()
        http.respond("https://x/t", [1, 2])
        result = http.get_json("https://x/t")
        assert isinstance(result, Err)
        assert result.error.message == "expected a JSON object"

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)
