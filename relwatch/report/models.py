"""Value objects shared by the collector, correlator and renderer.

All records are immutable and live only for one reporting run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

__all__ = [
    "DATE_SENTINEL",
    "CategoryRule",
    "CommitRecord",
    "PrefixCategoryRule",
    "PullRequestLink",
    "RecentTag",
    "RegexCategoryRule",
    "ShaGroup",
    "TagCommit",
    "TagMetadata",
    "TagRecord",
    "format_date",
    "parse_iso_date",
]

# Sorts after every real date; used when a tag has no usable date at all.
DATE_SENTINEL = datetime(1970, 1, 1, tzinfo=UTC)


def parse_iso_date(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp as produced by git (``%aI``) or GitHub.

    Naive timestamps are taken as UTC. Returns None for empty or malformed
    input.
    """
    if not value:
        return None
    s = value.strip()
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def format_date(value: datetime) -> str:
    return value.isoformat()


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """A commit as read from the local mirror."""

    sha: str
    author_date: datetime
    refs: tuple[str, ...]
    message: str
    author_name: str
    author_email: str
    body: str = ""

    @property
    def short_sha(self) -> str:
        return self.sha[:8]

    @property
    def has_tag_marker(self) -> bool:
        """True if a tag pointed at this commit when history was read."""
        return any(ref.startswith("tag:") for ref in self.refs)

    @property
    def refs_label(self) -> str:
        return ", ".join(self.refs)


@dataclass(frozen=True, slots=True)
class TagMetadata:
    """Tag object fields; only annotated tags carry tagger data."""

    is_annotated: bool
    tagger_name: str | None = None
    tagger_email: str | None = None
    tagger_date: datetime | None = None
    subject: str | None = None


@dataclass(frozen=True, slots=True)
class TagRecord:
    """A tag resolved to the commit it ultimately points at.

    ``date`` is never empty: annotated tags use the tagger date, lightweight
    tags their commit's author date (``date_fallback`` is then True), and
    DATE_SENTINEL stands in when neither is known.
    """

    name: str
    sha: str
    date: datetime
    metadata: TagMetadata | None = None
    date_fallback: bool = False

    @property
    def is_lightweight(self) -> bool:
        return self.metadata is None or not self.metadata.is_annotated


@dataclass(frozen=True, slots=True)
class TagCommit:
    """A tagged commit with every tag name that resolves to it."""

    sha: str
    date: datetime
    tags: tuple[str, ...]
    message: str
    author_name: str
    author_email: str


@dataclass(frozen=True, slots=True)
class PullRequestLink:
    number: int
    html_url: str
    title: str
    body: str = ""


@dataclass(frozen=True, slots=True)
class RecentTag:
    """Entry of the recently created tags report.

    ``metadata`` is None when the tag object could not be read.
    """

    name: str
    metadata: TagMetadata | None


class CategoryRule(Protocol):
    """Maps a tag name to its category key, or None if it has none."""

    def __call__(self, tag_name: str) -> str | None: ...


@dataclass(frozen=True, slots=True)
class RegexCategoryRule:
    """The first match of ``pattern`` in the tag name is the category."""

    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, pattern: str) -> RegexCategoryRule:
        return cls(re.compile(pattern))

    def __call__(self, tag_name: str) -> str | None:
        m = self.pattern.search(tag_name)
        if m is None or not m.group(0):
            return None
        return m.group(0)


@dataclass(frozen=True, slots=True)
class PrefixCategoryRule:
    """The first listed prefix the tag name starts with is the category."""

    prefixes: tuple[str, ...]

    def __call__(self, tag_name: str) -> str | None:
        for prefix in self.prefixes:
            if tag_name.startswith(prefix):
                return prefix
        return None


@dataclass(frozen=True, slots=True)
class ShaGroup:
    """Tags that share a target commit, dated by their first tag."""

    sha: str
    date: datetime
    tags: tuple[TagRecord, ...]
