"""Per-repository report pipelines and the multi-repository runner.

Each configured repository runs collect -> correlate -> categorize -> render
on its own worker, writing into its own ``BufferedConsole``. Buffers are
flushed whole as pipelines finish, and every pipeline is joined before the
run ends.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Literal

from relwatch.core.config import Config, RepoConfig
from relwatch.core.errors import ErrorCode
from relwatch.core.result import Err, Ok, Result
from relwatch.git.mirror import sync_mirror
from relwatch.git.repository import Repository
from relwatch.github.access import GitHubAccess
from relwatch.output.console import BufferedConsole, ConsoleProtocol, Style
from relwatch.report.categorizer import categorize, rule_for
from relwatch.report.collector import collect_recent_tags, collect_release_commits, collect_tag_history
from relwatch.report.correlator import IssueCollector, PullRequestFetcher, correlate_tags, walk_since_last_tag
from relwatch.report.remote_tags import date_tags, group_by_sha, select_by_category
from relwatch.report.render import (
    render_categories,
    render_recent_tags,
    render_release_walk,
    render_remote_tags,
)

__all__ = [
    "ReportError",
    "report_error_code",
    "run_remote_tag_report",
    "run_repo_report",
    "run_reports",
]

_ReportErrorKind = Literal["git", "network", "internal"]


@dataclass(frozen=True, slots=True)
class ReportError:
    repo: str
    kind: _ReportErrorKind
    message: str


RepoPipeline = Callable[[RepoConfig, ConsoleProtocol], Result[None, ReportError]]


def report_error_code(error: ReportError) -> ErrorCode:
    match error.kind:
        case "git":
            return ErrorCode.GIT_ERROR
        case "network":
            return ErrorCode.NETWORK_ERROR
        case _:
            return ErrorCode.INTERNAL_ERROR


def _pr_fetcher(repo: RepoConfig, github: GitHubAccess | None) -> PullRequestFetcher | None:
    if github is None:
        return None
    client = github.client
    owner, name = repo.slug.owner, repo.slug.name
    return lambda number: client.get_pull_request(owner, name, number)


def run_repo_report(
    repo_config: RepoConfig,
    *,
    config: Config,
    github: GitHubAccess | None,
    console: ConsoleProtocol,
    fetch: bool = True,
    verbose: bool = False,
) -> Result[None, ReportError]:
    """Full local-mirror report for one repository."""
    name = repo_config.name
    workers = config.github.concurrency
    console.header(f"==== {repo_config.slug.slug} ====")

    if fetch:
        synced = sync_mirror(repo_config.url, repo_config.local_path, console=console)
        if isinstance(synced, Err):
            return Err(ReportError(repo=name, kind="git", message=synced.error.message))
        repo = synced.value
    else:
        repo = Repository(repo_config.local_path)
        if not repo.exists():
            return Err(
                ReportError(repo=name, kind="git", message=f"no mirror at {repo_config.local_path}")
            )

    history = collect_tag_history(
        repo,
        max_tags=repo_config.max_tags,
        console=console,
        workers=workers,
        verbose=verbose,
    )
    if isinstance(history, Err):
        return Err(ReportError(repo=name, kind="git", message=history.error.message))

    tag_commits = correlate_tags(history.value.tags, history.value.commits)
    categories = categorize(tag_commits, rule_for(repo_config), repo_config.category_size)
    render_categories(categories, console)

    recent = collect_recent_tags(repo, limit=repo_config.recent_tags, console=console)
    if isinstance(recent, Err):
        return Err(ReportError(repo=name, kind="git", message=recent.error.message))
    render_recent_tags(recent.value, console)

    pattern = repo_config.release_branch_pattern
    if pattern is None:
        return Ok(None)

    commits = collect_release_commits(repo, pattern=pattern, max_count=repo_config.max_commits)
    if isinstance(commits, Err):
        return Err(ReportError(repo=name, kind="git", message=commits.error.message))

    walk = walk_since_last_tag(
        commits.value,
        fetch_pr=_pr_fetcher(repo_config, github),
        repo_base_url=repo_config.slug.web_url,
        issues=IssueCollector(config.issues.base_url, config.issues.exclude),
        console=console,
        workers=workers,
    )
    render_release_walk(walk, pattern=pattern, console=console)
    return Ok(None)


def run_remote_tag_report(
    repo_config: RepoConfig,
    *,
    config: Config,
    github: GitHubAccess,
    console: ConsoleProtocol,
    per_category: int = 5,
) -> Result[None, ReportError]:
    """Category overview of tags as listed by the GitHub API."""
    client = github.client
    owner, name = repo_config.slug.owner, repo_config.slug.name
    console.header(f"==== {repo_config.slug.slug} (remote tags) ====")

    listed = client.list_tags(owner, name, fetch_all=True)
    if isinstance(listed, Err):
        return Err(ReportError(repo=name, kind="network", message=str(listed.error)))
    console.print(f"Total tags fetched: {len(listed.value)}", Style.DIM)

    selected = select_by_category(listed.value, rule_for(repo_config), per_category)
    records = date_tags(
        [tag for tags in selected.values() for tag in tags],
        fetch_date=lambda sha: client.get_commit_date(owner, name, sha),
        console=console,
        workers=config.github.concurrency,
    )
    render_remote_tags(selected, group_by_sha(records), console, per_category=per_category)
    return Ok(None)


def run_reports(
    repos: Sequence[RepoConfig],
    pipeline: RepoPipeline,
    *,
    console: ConsoleProtocol,
) -> list[ReportError]:
    """Run ``pipeline`` for every repository and join them all.

    Output of each repository is flushed in one piece as it completes. An
    unexpected exception in one pipeline is reported as that repository's
    error and does not affect the others.
    """
    errors: list[ReportError] = []
    if not repos:
        return errors

    with ThreadPoolExecutor(max_workers=len(repos)) as ex:
        futs: dict[Future[Result[None, ReportError]], tuple[RepoConfig, BufferedConsole]] = {}
        for repo in repos:
            buffer = BufferedConsole()
            futs[ex.submit(pipeline, repo, buffer)] = (repo, buffer)

        for fut in as_completed(futs):
            repo, buffer = futs[fut]
            try:
                result = fut.result()
            except Exception as e:  # noqa: BLE001 - isolate one repository's crash
                result = Err(ReportError(repo=repo.name, kind="internal", message=f"{type(e).__name__}: {e}"))
            if isinstance(result, Err):
                buffer.error(f"{result.error.repo}: {result.error.message}")
                errors.append(result.error)
            buffer.flush_to(console)

    return errors
