"""GitHub REST API calls used by the reports.

All functions go through an ``HttpClient`` so tests can answer with canned
payloads. Nothing here retries: a failed call is returned as an Err and the
caller decides whether the item is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from relwatch.core.result import Err, Ok, Result
from relwatch.core.structured import as_str_dict, get_int, get_raw_str, get_str, get_table
from relwatch.github.http import HttpError, decode_array
from relwatch.report.models import PullRequestLink, parse_iso_date

if TYPE_CHECKING:
    from relwatch.github.http import HttpClient

__all__ = ["GitHubClient", "RemoteTag"]

_MAX_TAG_PAGES = 100


@dataclass(frozen=True, slots=True)
class RemoteTag:
    """A tag as listed by the API (name and target commit only)."""

    name: str
    sha: str


class GitHubClient:
    """Thin typed wrapper over the endpoints the reports need."""

    def __init__(self, http: HttpClient, api_url: str = "https://api.github.com") -> None:
        self.http = http
        self.api_url = api_url.rstrip("/")

    def get_pull_request(self, owner: str, repo: str, number: int) -> Result[PullRequestLink, HttpError]:
        """Fetch one pull request; a missing PR is an Err with status 404."""
        url = f"{self.api_url}/repos/{owner}/{repo}/pulls/{number}"
        result = self.http.get_json(url)
        if isinstance(result, Err):
            return result

        data = result.value
        html_url = get_str(data, "html_url")
        if html_url is None:
            return Err(HttpError(url=url, status=0, message="response has no html_url"))
        return Ok(
            PullRequestLink(
                number=get_int(data, "number") or number,
                html_url=html_url,
                title=get_raw_str(data, "title") or "",
                body=get_raw_str(data, "body") or "",
            )
        )

    def list_tags(
        self,
        owner: str,
        repo: str,
        *,
        fetch_all: bool = True,
        per_page: int = 100,
    ) -> Result[list[RemoteTag], HttpError]:
        """List tags page by page, in the order the API returns them.

        With ``fetch_all`` pages are read until a short or empty page;
        otherwise only the first page is returned.
        """
        tags: list[RemoteTag] = []
        for page in range(1, _MAX_TAG_PAGES + 1):
            url = f"{self.api_url}/repos/{owner}/{repo}/tags?per_page={per_page}&page={page}"
            text = self.http.get_text(url)
            if isinstance(text, Err):
                return text
            decoded = decode_array(url, text.value)
            if isinstance(decoded, Err):
                return decoded
            items = decoded.value

            for item in items:
                data = as_str_dict(item)
                if data is None:
                    continue
                name = get_str(data, "name")
                commit = get_table(data, "commit") or {}
                sha = get_str(commit, "sha")
                if name and sha:
                    tags.append(RemoteTag(name=name, sha=sha))

            if not fetch_all or len(items) < per_page:
                break
        return Ok(tags)

    def get_commit_date(self, owner: str, repo: str, sha: str) -> Result[datetime | None, HttpError]:
        """Author date of a commit; Ok(None) when the payload has none."""
        url = f"{self.api_url}/repos/{owner}/{repo}/commits/{sha}"
        result = self.http.get_json(url)
        if isinstance(result, Err):
            return result
        commit = get_table(result.value, "commit") or {}
        author = get_table(commit, "author") or {}
        return Ok(parse_iso_date(get_str(author, "date")))
