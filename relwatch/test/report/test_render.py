"""Tests for relwatch.report.render module."""

from __future__ import annotations

from datetime import UTC, datetime

from relwatch.github.api import RemoteTag
from relwatch.output.console import MockConsole, Style
from relwatch.report.correlator import ReleaseWalk, WalkEntry
from relwatch.report.models import (
    DATE_SENTINEL,
    CommitRecord,
    PullRequestLink,
    RecentTag,
    ShaGroup,
    TagCommit,
    TagMetadata,
    TagRecord,
)
from relwatch.report.render import (
    render_categories,
    render_recent_tags,
    render_release_walk,
    render_remote_tags,
)

DATE = datetime(2024, 5, 1, 12, tzinfo=UTC)


def _entry(sha: str, message: str, pr: PullRequestLink | None, refs: tuple[str, ...] = ()) -> WalkEntry:
    commit = CommitRecord(
        sha=sha,
        author_date=DATE,
        refs=refs,
        message=message,
        author_name="Ada",
        author_email="ada@example.com",
    )
    return WalkEntry(commit=commit, pr_number=pr.number if pr else None, pull_request=pr)


class TestRenderCategories:
    def test_category_blocks(self) -> None:
        console = MockConsole()
        commit = TagCommit(
            sha="abc",
            date=DATE,
            tags=("v1.0.0", "v1.0.0-final"),
            message="release 1.0",
            author_name="Ada",
            author_email="ada@example.com",
        )

        render_categories({"v": [commit]}, console)

        assert console.outputs[0].message == "Category: v"
        assert console.outputs[0].style == Style.HEADER
        assert console.find("Most Recent Commit #1:")
        assert console.find("  SHA: abc")
        assert console.find("  Date: 2024-05-01T12:00:00+00:00")
        assert console.find("  Tags: v1.0.0, v1.0.0-final")
        assert console.find("  Author: Ada <ada@example.com>")
        assert console.find("  Message: release 1.0")

    def test_no_categories(self) -> None:
        console = MockConsole()
        render_categories({}, console)
        assert console.messages == ["info: no tags matched any category"]


class TestRenderRecentTags:
    def test_annotated_and_lightweight(self) -> None:
        console = MockConsole()
        tags = [
            RecentTag(
                "v2",
                TagMetadata(
                    is_annotated=True,
                    tagger_name="Bot",
                    tagger_email="bot@example.com",
                    tagger_date=DATE,
                    subject="Release v2",
                ),
            ),
            RecentTag("v1", TagMetadata(is_annotated=False)),
            RecentTag("v0", None),
        ]

        render_recent_tags(tags, console)

        assert console.messages[0] == "--------------TAGS---------------------"
        assert console.find("Processing the most recent 3 tags:")
        assert console.find("Tagger: Bot <bot@example.com>")
        assert console.find("Message: Release v2")
        assert console.find("warning: 'v1' is a lightweight tag and does not contain additional metadata.")
        assert console.find("Tag metadata unavailable")

    def test_annotated_with_missing_fields(self) -> None:
        console = MockConsole()
        render_recent_tags([RecentTag("v3", TagMetadata(is_annotated=True))], console)
        assert console.find("Tagger: unknown <>")
        assert console.find("Date: unknown")


class TestRenderReleaseWalk:
    def test_full_walk(self) -> None:
        pr = PullRequestLink(1, "https://github.com/o/r/pull/1", "t")
        walk = ReleaseWalk(
            since_tag=(_entry("c0", "fix: missing (#9999)", None), _entry("c1", "feat (#1)", pr)),
            last_tag=_entry("c2", "release", None, refs=("tag: v7.1.0",)),
            diff_url="https://github.com/o/r/compare/c2...c0",
            issue_links=("https://jira/browse/ABC-1",),
        )
        console = MockConsole()

        render_release_walk(walk, pattern="chore_release*", console=console)

        assert console.messages[0] == "Here are the most recent commits on --remotes origin/chore_release*:"
        pr_lines = [o.message for o in console.find("PR Link:")]
        assert pr_lines == [
            "  PR Link: N/A",
            "  PR Link: https://github.com/o/r/pull/1",
            "  PR Link: N/A",
        ]
        assert console.find("Most Recent Tag:")
        assert console.find("  tag: v7.1.0")
        assert console.find("  https://github.com/o/r/compare/c2...c0")
        assert console.find("  Issue Link: https://jira/browse/ABC-1")
        assert console.messages[-2] == "- strongly feel we should cut a new build 🪓"

    def test_no_tag_and_no_issues(self) -> None:
        walk = ReleaseWalk(since_tag=(), last_tag=None, diff_url=None, issue_links=())
        console = MockConsole()

        render_release_walk(walk, pattern="main", console=console)

        assert console.find("warning: no tagged commit found in the walked history")
        assert not console.find("View diff since the last tag:")
        assert console.find("  (none)")


class TestRenderRemoteTags:
    def test_selection_and_groups(self) -> None:
        console = MockConsole()
        selected = {"v": [RemoteTag("v2", "s2"), RemoteTag("v1", "s1")]}
        groups = [
            ShaGroup("s2", DATE, (TagRecord("v2", "s2", DATE),)),
            ShaGroup("s1", DATE_SENTINEL, (TagRecord("v1", "s1", DATE_SENTINEL, date_fallback=True),)),
        ]

        render_remote_tags(selected, groups, console, per_category=2)

        assert console.find("First 2 Tags for category 'v':")
        assert console.find("v2 - SHA: s2")
        assert console.find("Tags for SHA s2:")
        assert console.find("- v2 - Date: 2024-05-01T12:00:00+00:00 - SHA: s2")
        assert console.find("- v1 - Date: unknown - SHA: s1")
