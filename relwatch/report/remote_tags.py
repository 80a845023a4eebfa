"""Tag overview built from the GitHub API instead of the local mirror.

Lists tags in API order, keeps the first few per category, dates each one
by its commit and groups tags that share a commit, newest group first.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from relwatch.core.concurrency import bounded_map
from relwatch.core.result import Err, Result
from relwatch.github.api import RemoteTag
from relwatch.github.http import HttpError
from relwatch.output.console import ConsoleProtocol
from relwatch.report.models import DATE_SENTINEL, CategoryRule, ShaGroup, TagRecord

__all__ = ["date_tags", "group_by_sha", "select_by_category"]

CommitDateFetcher = Callable[[str], Result[datetime | None, HttpError]]


def select_by_category(
    tags: Sequence[RemoteTag],
    rule: CategoryRule,
    per_category: int,
) -> dict[str, list[RemoteTag]]:
    """First ``per_category`` tags of each category, in listing order."""
    selected: dict[str, list[RemoteTag]] = {}
    for tag in tags:
        category = rule(tag.name)
        if category is None:
            continue
        bucket = selected.setdefault(category, [])
        if len(bucket) < per_category:
            bucket.append(tag)
    return selected


def date_tags(
    tags: Sequence[RemoteTag],
    *,
    fetch_date: CommitDateFetcher,
    console: ConsoleProtocol,
    workers: int = 8,
) -> list[TagRecord]:
    """Date every tag by its commit; failed lookups drop the tag.

    A commit without an author date gets DATE_SENTINEL so it sorts last.
    """
    def _fetch(tag: RemoteTag) -> Result[datetime | None, object]:
        try:
            return fetch_date(tag.sha)
        except Exception as e:  # drops this tag only
            return Err(f"{type(e).__name__}: {e}")

    results = bounded_map(_fetch, tags, workers)

    records: list[TagRecord] = []
    for tag, result in zip(tags, results):
        if isinstance(result, Err):
            console.warning(f"failed to fetch commit for tag {tag.name}: {result.error}")
            continue
        date = result.value
        records.append(
            TagRecord(
                name=tag.name,
                sha=tag.sha,
                date=date or DATE_SENTINEL,
                date_fallback=date is None,
            )
        )
    return records


def group_by_sha(records: Sequence[TagRecord]) -> list[ShaGroup]:
    """Group tags by target sha, newest group first (stable on ties)."""
    grouped: dict[str, list[TagRecord]] = {}
    for record in records:
        grouped.setdefault(record.sha, []).append(record)

    groups = [ShaGroup(sha=sha, date=items[0].date, tags=tuple(items)) for sha, items in grouped.items()]
    groups.sort(key=lambda g: g.date, reverse=True)
    return groups
