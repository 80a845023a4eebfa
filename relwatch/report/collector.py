"""History collection from the local mirror.

Turns tag names into fully populated ``TagRecord`` / ``CommitRecord`` pairs.
Per-tag git calls run on a bounded pool; diagnostics are emitted afterwards
in tag order so the report reads the same on every run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from relwatch.core.concurrency import bounded_map
from relwatch.core.result import Err, Ok, Result
from relwatch.git.repository import GitError, Repository
from relwatch.output.console import ConsoleProtocol
from relwatch.report.models import CommitRecord, RecentTag, TagMetadata, TagRecord

__all__ = [
    "TagHistory",
    "collect_recent_tags",
    "collect_release_commits",
    "collect_tag_history",
]

_FALLBACK_NAMES_SHOWN = 5


@dataclass(frozen=True, slots=True)
class TagHistory:
    """Tags in listing order plus the commits they target, keyed by sha."""

    tags: tuple[TagRecord, ...]
    commits: dict[str, CommitRecord] = field(default_factory=dict)
    skipped: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class _TagOutcome:
    name: str
    tag: TagRecord | None = None
    commit: CommitRecord | None = None
    skip_reason: str | None = None
    metadata_error: str | None = None


def _collect_one(repo: Repository, name: str) -> _TagOutcome:
    target = repo.resolve_tag_target(name)
    if isinstance(target, Err):
        return _TagOutcome(name=name, skip_reason=target.error.message)

    commit = repo.read_commit(target.value)
    if isinstance(commit, Err):
        return _TagOutcome(name=name, skip_reason=commit.error.message)

    metadata: TagMetadata | None = None
    metadata_error: str | None = None
    match repo.read_tag_metadata(name):
        case Ok(value):
            metadata = value
        case Err(error):
            metadata_error = error.message

    tagger_date = metadata.tagger_date if metadata is not None and metadata.is_annotated else None
    tag = TagRecord(
        name=name,
        sha=target.value,
        date=tagger_date or commit.value.author_date,
        metadata=metadata,
        date_fallback=tagger_date is None,
    )
    return _TagOutcome(name=name, tag=tag, commit=commit.value, metadata_error=metadata_error)


def collect_tag_history(
    repo: Repository,
    *,
    max_tags: int,
    console: ConsoleProtocol,
    workers: int = 8,
    sort: str = "-v:refname",
    verbose: bool = False,
) -> Result[TagHistory, GitError]:
    """Read the first ``max_tags`` tags (in ``sort`` order) and their commits.

    A tag that cannot be resolved or whose commit cannot be read is skipped
    with a warning; only failing to list tags at all is an error. Date
    fallbacks are warned about per tag with ``verbose``, otherwise in one
    summary line naming the first few tags.
    """
    listed = repo.list_tags(sort=sort)
    if isinstance(listed, Err):
        return listed
    names = listed.value[:max_tags]

    outcomes = bounded_map(lambda name: _collect_one(repo, name), names, workers)

    tags: list[TagRecord] = []
    commits: dict[str, CommitRecord] = {}
    skipped: list[str] = []
    fallbacks: list[str] = []
    for outcome in outcomes:
        if outcome.tag is None or outcome.commit is None:
            console.warning(f"skipping tag '{outcome.name}': {outcome.skip_reason}")
            skipped.append(outcome.name)
            continue
        if outcome.metadata_error is not None:
            console.warning(f"cannot read tag '{outcome.name}' metadata: {outcome.metadata_error}")
        if outcome.tag.date_fallback:
            fallbacks.append(outcome.name)
            if verbose:
                console.warning(
                    f"tag '{outcome.name}' has no tagger date; using commit date "
                    f"{outcome.commit.author_date.isoformat()}"
                )
        tags.append(outcome.tag)
        commits.setdefault(outcome.commit.sha, outcome.commit)

    if fallbacks and not verbose:
        shown = ", ".join(fallbacks[:_FALLBACK_NAMES_SHOWN])
        more = " ..." if len(fallbacks) > _FALLBACK_NAMES_SHOWN else ""
        console.warning(f"{len(fallbacks)} tag(s) without tagger date; using commit dates: {shown}{more}")

    return Ok(TagHistory(tags=tuple(tags), commits=commits, skipped=tuple(skipped)))


def collect_recent_tags(
    repo: Repository,
    *,
    limit: int,
    console: ConsoleProtocol,
) -> Result[list[RecentTag], GitError]:
    """The ``limit`` most recently created tags with their tag metadata."""
    listed = repo.list_tags(sort="-creatordate")
    if isinstance(listed, Err):
        return listed

    recent: list[RecentTag] = []
    for name in listed.value[:limit]:
        match repo.read_tag_metadata(name):
            case Ok(metadata):
                recent.append(RecentTag(name=name, metadata=metadata))
            case Err(error):
                console.warning(f"cannot read tag '{name}' metadata: {error.message}")
                recent.append(RecentTag(name=name, metadata=None))
    return Ok(recent)


def collect_release_commits(
    repo: Repository,
    *,
    pattern: str,
    max_count: int,
) -> Result[list[CommitRecord], GitError]:
    """Newest-first commits on remote branches matching ``origin/<pattern>``."""
    return repo.list_commits(max_count, remote_pattern=pattern)
