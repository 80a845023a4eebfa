"""Tests for relwatch.github.api module."""

from __future__ import annotations

import json
from datetime import UTC, datetime

from relwatch.core.result import Err, Ok
from relwatch.github.api import GitHubClient, RemoteTag
from relwatch.github.http import HttpError, MockHttpClient

API = "https://api.github.com"


def _tags_page(names: list[str]) -> str:
    return json.dumps([{"name": n, "commit": {"sha": f"sha-{n}"}} for n in names])


# =============================================================================
# Pull requests
# =============================================================================


class TestGetPullRequest:
    """Tests for GitHubClient.get_pull_request."""

    def test_success(self) -> None:
        http = MockHttpClient()
        http.respond(
            f"{API}/repos/octo/tools/pulls/42",
            {
                "number": 42,
                "html_url": "https://github.com/octo/tools/pull/42",
                "title": "fix(app): AB-12 crash",
                "body": "Closes AB-13",
            },
        )

        result = GitHubClient(http).get_pull_request("octo", "tools", 42)

        assert isinstance(result, Ok)
        assert result.value.number == 42
        assert result.value.html_url == "https://github.com/octo/tools/pull/42"
        assert result.value.title == "fix(app): AB-12 crash"
        assert result.value.body == "Closes AB-13"

    def test_null_body(self) -> None:
        http = MockHttpClient()
        http.respond(
            f"{API}/repos/octo/tools/pulls/1",
            {"number": 1, "html_url": "https://github.com/octo/tools/pull/1", "title": "t", "body": None},
        )

        result = GitHubClient(http).get_pull_request("octo", "tools", 1)

        assert isinstance(result, Ok)
        assert result.value.body == ""

    def test_not_found(self) -> None:
        result = GitHubClient(MockHttpClient()).get_pull_request("octo", "tools", 9999)

        assert isinstance(result, Err)
        assert result.error.is_not_found

    def test_missing_html_url(self) -> None:
        http = MockHttpClient()
        http.respond(f"{API}/repos/octo/tools/pulls/3", {"number": 3})

        result = GitHubClient(http).get_pull_request("octo", "tools", 3)

        assert isinstance(result, Err)
        assert result.error.message == "response has no html_url"

    def test_custom_api_url(self) -> None:
        http = MockHttpClient()
        client = GitHubClient(http, api_url="https://ghe.example.com/api/v3/")
        client.get_pull_request("octo", "tools", 5)
        assert http.requested == ["https://ghe.example.com/api/v3/repos/octo/tools/pulls/5"]


# =============================================================================
# Tags
# =============================================================================


class TestListTags:
    """Tests for GitHubClient.list_tags."""

    def test_single_short_page(self) -> None:
        http = MockHttpClient()
        http.respond(f"{API}/repos/octo/tools/tags?per_page=100&page=1", _tags_page(["v2", "v1"]))

        result = GitHubClient(http).list_tags("octo", "tools")

        assert isinstance(result, Ok)
        assert result.value == [RemoteTag("v2", "sha-v2"), RemoteTag("v1", "sha-v1")]
        assert len(http.requested) == 1

    def test_paginates_until_short_page(self) -> None:
        http = MockHttpClient()
        base = f"{API}/repos/octo/tools/tags?per_page=2"
        http.respond(f"{base}&page=1", _tags_page(["a", "b"]))
        http.respond(f"{base}&page=2", _tags_page(["c", "d"]))
        http.respond(f"{base}&page=3", _tags_page([]))

        result = GitHubClient(http).list_tags("octo", "tools", per_page=2)

        assert isinstance(result, Ok)
        assert [t.name for t in result.value] == ["a", "b", "c", "d"]
        assert len(http.requested) == 3

    def test_first_page_only(self) -> None:
        http = MockHttpClient()
        http.respond(f"{API}/repos/octo/tools/tags?per_page=2&page=1", _tags_page(["a", "b"]))

        result = GitHubClient(http).list_tags("octo", "tools", fetch_all=False, per_page=2)

        assert isinstance(result, Ok)
        assert len(result.value) == 2
        assert len(http.requested) == 1

    def test_skips_malformed_items(self) -> None:
        http = MockHttpClient()
        http.respond(
            f"{API}/repos/octo/tools/tags?per_page=100&page=1",
            json.dumps([{"name": "v1", "commit": {"sha": "abc"}}, {"name": "v2"}, "junk"]),
        )

        result = GitHubClient(http).list_tags("octo", "tools")

        assert isinstance(result, Ok)
        assert result.value == [RemoteTag("v1", "abc")]

    def test_not_an_array(self) -> None:
        http = MockHttpClient()
        http.respond(f"{API}/repos/octo/tools/tags?per_page=100&page=1", '{"message": "Bad credentials"}')

        result = GitHubClient(http).list_tags("octo", "tools")

        assert isinstance(result, Err)
        assert result.error.message == "expected a JSON array"

    def test_http_error(self) -> None:
        http = MockHttpClient()
        http.respond(
            f"{API}/repos/octo/tools/tags?per_page=100&page=1",
            HttpError(url="x", status=401, message="Unauthorized"),
        )

        result = GitHubClient(http).list_tags("octo", "tools")

        assert isinstance(result, Err)
        assert result.error.status == 401


# =============================================================================
# Commit dates
# =============================================================================


class TestGetCommitDate:
    """Tests for GitHubClient.get_commit_date."""

    def test_author_date(self) -> None:
        http = MockHttpClient()
        http.respond(
            f"{API}/repos/octo/tools/commits/abc",
            {"commit": {"author": {"date": "2024-01-02T03:04:05Z"}}},
        )

        result = GitHubClient(http).get_commit_date("octo", "tools", "abc")

        assert isinstance(result, Ok)
        assert result.value == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)

    def test_missing_date(self) -> None:
        http = MockHttpClient()
        http.respond(f"{API}/repos/octo/tools/commits/abc", {"commit": {}})

        result = GitHubClient(http).get_commit_date("octo", "tools", "abc")

        assert isinstance(result, Ok)
        assert result.value is None

    def test_error(self) -> None:
        result = GitHubClient(MockHttpClient()).get_commit_date("octo", "tools", "abc")
        assert isinstance(result, Err)
