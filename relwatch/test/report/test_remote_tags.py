"""Tests for relwatch.report.remote_tags module."""

from __future__ import annotations

import http.client
from datetime import UTC, datetime

from relwatch.core.result import Err, Ok, Result
from relwatch.github.api import RemoteTag
from relwatch.github.http import HttpError
from relwatch.output.console import MockConsole
from relwatch.report.models import DATE_SENTINEL, RegexCategoryRule, TagRecord
from relwatch.report.remote_tags import date_tags, group_by_sha, select_by_category

RULE = RegexCategoryRule.compile(r"^[a-z]+")


def _dt(day: int) -> datetime:
    return datetime(2024, 1, day, tzinfo=UTC)


class TestSelectByCategory:
    def test_first_n_in_listing_order(self) -> None:
        tags = [RemoteTag(f"v{i}", f"s{i}") for i in range(5)] + [RemoteTag("docs@1", "d1")]

        selected = select_by_category(tags, RULE, 2)

        assert list(selected) == ["v", "docs"]
        assert [t.name for t in selected["v"]] == ["v0", "v1"]
        assert [t.name for t in selected["docs"]] == ["docs@1"]

    def test_unmatched_dropped(self) -> None:
        assert select_by_category([RemoteTag("1.0", "s")], RULE, 5) == {}


class TestDateTags:
    def test_dates_and_failures(self) -> None:
        dates: dict[str, Result[datetime | None, HttpError]] = {
            "s1": Ok(_dt(3)),
            "s2": Ok(None),
            "s3": Err(HttpError(url="commits/s3", status=502, message="Bad Gateway")),
        }
        tags = [RemoteTag("v1", "s1"), RemoteTag("v2", "s2"), RemoteTag("v3", "s3")]
        console = MockConsole()

        records = date_tags(tags, fetch_date=lambda sha: dates[sha], console=console, workers=2)

        assert [r.name for r in records] == ["v1", "v2"]
        assert records[0].date == _dt(3)
        assert records[0].date_fallback is False
        assert records[1].date == DATE_SENTINEL
        assert records[1].date_fallback is True
        assert console.find("failed to fetch commit for tag v3")

    def test_raising_lookup_drops_only_that_tag(self) -> None:
        def fetch_date(sha: str) -> Result[datetime | None, HttpError]:
            if sha == "s2":
                raise http.client.IncompleteRead(b"partial")
            return Ok(_dt(int(sha[1:])))

        tags = [RemoteTag("v1", "s1"), RemoteTag("v2", "s2"), RemoteTag("v3", "s3")]
        console = MockConsole()

        records = date_tags(tags, fetch_date=fetch_date, console=console, workers=3)

        assert [(r.name, r.date) for r in records] == [("v1", _dt(1)), ("v3", _dt(3))]
        assert console.find("failed to fetch commit for tag v2: IncompleteRead")


class TestGroupBySha:
    def test_groups_newest_first(self) -> None:
        records = [
            TagRecord("v1", "old", _dt(1)),
            TagRecord("v2", "new", _dt(5)),
            TagRecord("docs@2", "new", _dt(5)),
            TagRecord("v0", "undated", DATE_SENTINEL, date_fallback=True),
        ]

        groups = group_by_sha(records)

        assert [g.sha for g in groups] == ["new", "old", "undated"]
        assert [t.name for t in groups[0].tags] == ["v2", "docs@2"]
        assert groups[0].date == _dt(5)

    def test_ties_keep_first_seen_order(self) -> None:
        records = [TagRecord("a", "s1", _dt(1)), TagRecord("b", "s2", _dt(1))]
        assert [g.sha for g in group_by_sha(records)] == ["s1", "s2"]
