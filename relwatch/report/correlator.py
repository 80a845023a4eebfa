"""Correlation of tags, commits, pull requests and issue-tracker ids.

Pure functions over already-collected records; the only side effects are
the pull request fetches done through the injected ``fetch_pr`` callable
and the warnings written for fetches that fail.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass

from relwatch.core.concurrency import bounded_map
from relwatch.core.result import Err, Ok, Result
from relwatch.output.console import ConsoleProtocol
from relwatch.report.models import CommitRecord, PullRequestLink, TagCommit, TagRecord

__all__ = [
    "IssueCollector",
    "PullRequestFetcher",
    "ReleaseWalk",
    "WalkEntry",
    "correlate_tags",
    "find_pull_request_number",
    "walk_since_last_tag",
]

_PR_RE = re.compile(r"#(\d+)")
_ISSUE_ID_RE = re.compile(r"[a-z]+-\d{1,5}", re.IGNORECASE)

PullRequestFetcher = Callable[[int], Result[PullRequestLink, object]]


def correlate_tags(tags: Iterable[TagRecord], commits: Mapping[str, CommitRecord]) -> list[TagCommit]:
    """Collapse tags into one ``TagCommit`` per target sha.

    The first tag seen for a sha creates the entry; later tags only add
    their name, once. Tags whose commit is missing from ``commits`` are
    ignored. Entries come back in first-seen order.
    """
    names_by_sha: dict[str, list[str]] = {}
    for tag in tags:
        if tag.sha not in commits:
            continue
        names = names_by_sha.setdefault(tag.sha, [])
        if tag.name not in names:
            names.append(tag.name)

    result: list[TagCommit] = []
    for sha, names in names_by_sha.items():
        commit = commits[sha]
        result.append(
            TagCommit(
                sha=sha,
                date=commit.author_date,
                tags=tuple(names),
                message=commit.message,
                author_name=commit.author_name,
                author_email=commit.author_email,
            )
        )
    return result


def find_pull_request_number(message: str) -> int | None:
    """First ``#<digits>`` in the message, if any."""
    m = _PR_RE.search(message)
    if m is None:
        return None
    return int(m.group(1))


class IssueCollector:
    """Accumulates issue-tracker ids and links across a repository's PRs.

    Ids (``ABC-123``) are upper-cased; links matching ``base_url`` are kept
    verbatim. ``links()`` turns ids into URLs, drops excluded ids and
    merges both sets without duplicates.
    """

    def __init__(self, base_url: str, exclude: Iterable[str] = ()) -> None:
        self.base_url = base_url
        self.exclude = frozenset(e.upper() for e in exclude)
        self._link_re = re.compile(re.escape(base_url) + r"[A-Z]+-\d+", re.IGNORECASE)
        self._ids: dict[str, None] = {}
        self._links: dict[str, None] = {}

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    @property
    def raw_links(self) -> list[str]:
        return list(self._links)

    def add_text(self, text: str) -> None:
        for found in _ISSUE_ID_RE.findall(text):
            self._ids.setdefault(found.upper(), None)
        for link in self._link_re.findall(text):
            self._links.setdefault(link, None)

    def add_pull_request(self, pr: PullRequestLink) -> None:
        self.add_text(pr.title)
        self.add_text(pr.body)

    def links(self) -> list[str]:
        combined: dict[str, None] = {}
        for issue_id in self._ids:
            if issue_id not in self.exclude:
                combined.setdefault(f"{self.base_url}{issue_id}", None)
        for link in self._links:
            combined.setdefault(link, None)
        return list(combined)


@dataclass(frozen=True, slots=True)
class WalkEntry:
    """A walked commit and its pull request (None when unavailable)."""

    commit: CommitRecord
    pr_number: int | None
    pull_request: PullRequestLink | None


@dataclass(frozen=True, slots=True)
class ReleaseWalk:
    """Commits since the most recent tag on the release branches.

    ``since_tag`` is newest first. ``last_tag`` and ``diff_url`` are None
    when no walked commit carried a tag.
    """

    since_tag: tuple[WalkEntry, ...]
    last_tag: WalkEntry | None
    diff_url: str | None
    issue_links: tuple[str, ...]


def walk_since_last_tag(
    commits: Sequence[CommitRecord],
    *,
    fetch_pr: PullRequestFetcher | None,
    repo_base_url: str,
    issues: IssueCollector,
    console: ConsoleProtocol,
    workers: int = 8,
) -> ReleaseWalk:
    """Walk newest to oldest and stop at the first tagged commit.

    Commits past the tagged one are never examined and their pull requests
    never fetched. A failed fetch is reported and the commit is kept with
    no PR; it never stops the walk.
    """
    ordered = sorted(commits, key=lambda c: c.author_date, reverse=True)

    cut = next((i for i, c in enumerate(ordered) if c.has_tag_marker), None)
    walked = ordered if cut is None else ordered[: cut + 1]

    numbers = [find_pull_request_number(c.message) for c in walked]

    def _fetch(number: int | None) -> Result[PullRequestLink, object] | None:
        if number is None or fetch_pr is None:
            return None
        try:
            return fetch_pr(number)
        except Exception as e:  # stays with this commit, the walk goes on
            return Err(f"{type(e).__name__}: {e}")

    fetched = bounded_map(_fetch, numbers, workers)

    entries: list[WalkEntry] = []
    for commit, number, outcome in zip(walked, numbers, fetched):
        pr: PullRequestLink | None = None
        match outcome:
            case Ok(value):
                pr = value
                issues.add_pull_request(value)
            case Err(error):
                console.warning(f"cannot fetch PR #{number} for {commit.short_sha}: {error}")
            case None:
                pass
        entries.append(WalkEntry(commit=commit, pr_number=number, pull_request=pr))

    if cut is None:
        return ReleaseWalk(
            since_tag=tuple(entries),
            last_tag=None,
            diff_url=None,
            issue_links=tuple(issues.links()),
        )

    last_tag = entries[-1]
    newest = entries[0].commit
    base = repo_base_url.removesuffix(".git").rstrip("/")
    return ReleaseWalk(
        since_tag=tuple(entries[:-1]),
        last_tag=last_tag,
        diff_url=f"{base}/compare/{last_tag.commit.sha}...{newest.sha}",
        issue_links=tuple(issues.links()),
    )
