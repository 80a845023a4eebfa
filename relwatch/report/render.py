"""Plain-text rendering of the report sections."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from relwatch.github.api import RemoteTag
from relwatch.output.console import ConsoleProtocol, Style
from relwatch.report.correlator import ReleaseWalk, WalkEntry
from relwatch.report.models import DATE_SENTINEL, RecentTag, ShaGroup, TagCommit, format_date

__all__ = [
    "NO_PR",
    "render_categories",
    "render_recent_tags",
    "render_release_walk",
    "render_remote_tags",
]

NO_PR = "N/A"


def render_categories(categories: Mapping[str, Sequence[TagCommit]], console: ConsoleProtocol) -> None:
    if not categories:
        console.info("no tags matched any category")
        return
    for category, commits in categories.items():
        console.header(f"Category: {category}")
        for index, commit in enumerate(commits, start=1):
            console.newline()
            console.print(f"Most Recent Commit #{index}:", Style.BOLD)
            console.print(f"  SHA: {commit.sha}")
            console.print(f"  Date: {format_date(commit.date)}")
            console.print(f"  Tags: {', '.join(commit.tags)}")
            console.print(f"  Author: {commit.author_name} <{commit.author_email}>")
            console.print(f"  Message: {commit.message}")


def render_recent_tags(tags: Sequence[RecentTag], console: ConsoleProtocol) -> None:
    """Tagger details per tag; lightweight tags get a warning instead."""
    console.header("--------------TAGS---------------------")
    console.print(f"Processing the most recent {len(tags)} tags:")
    for tag in tags:
        console.newline()
        console.print(f"Tag: {tag.name}", Style.BOLD)
        meta = tag.metadata
        if meta is None:
            console.print("Tag metadata unavailable", Style.DIM)
            continue
        if not meta.is_annotated:
            console.warning(f"'{tag.name}' is a lightweight tag and does not contain additional metadata.")
            continue
        console.print(f"Tagger: {meta.tagger_name or 'unknown'} <{meta.tagger_email or ''}>")
        console.print(f"Date: {format_date(meta.tagger_date) if meta.tagger_date else 'unknown'}")
        console.print(f"Message: {meta.subject or ''}")


def _render_entry(entry: WalkEntry, console: ConsoleProtocol) -> None:
    commit = entry.commit
    console.newline()
    console.print(commit.sha, Style.BOLD)
    console.print(f"  {format_date(commit.author_date)}")
    console.print(f"  {commit.refs_label}")
    console.print(f"  {commit.message}")
    link = entry.pull_request.html_url if entry.pull_request is not None else NO_PR
    console.print(f"  PR Link: {link}")


def render_release_walk(walk: ReleaseWalk, *, pattern: str, console: ConsoleProtocol) -> None:
    console.header(f"Here are the most recent commits on --remotes origin/{pattern}:")
    for entry in walk.since_tag:
        _render_entry(entry, console)

    if walk.last_tag is None:
        console.newline()
        console.warning("no tagged commit found in the walked history")
    else:
        console.header("Most Recent Tag:")
        _render_entry(walk.last_tag, console)
        console.print("_________________________")
        console.newline()
        console.print("View diff since the last tag:")
        console.print(f"  {walk.diff_url}")

    console.header("Here are the issue links associated with the commits:")
    if not walk.issue_links:
        console.print("  (none)", Style.DIM)
    for link in walk.issue_links:
        console.print(f"  Issue Link: {link}")

    console.newline()
    console.print("let us know if you:")
    console.print("- strongly feel we should cut a new build 🪓")
    console.print("- strongly feel we should wait ⏳")


def render_remote_tags(
    selected: Mapping[str, Sequence[RemoteTag]],
    groups: Sequence[ShaGroup],
    console: ConsoleProtocol,
    *,
    per_category: int,
) -> None:
    for category, tags in selected.items():
        console.header(f"First {per_category} Tags for category '{category}':")
        for tag in tags:
            console.print(f"{tag.name} - SHA: {tag.sha}")
        console.print("-------------------", Style.DIM)

    for group in groups:
        console.header(f"Tags for SHA {group.sha}:")
        for record in group.tags:
            date = "unknown" if record.date == DATE_SENTINEL else format_date(record.date)
            console.print(f"- {record.name} - Date: {date} - SHA: {record.sha}")
        console.print("-------------------", Style.DIM)
