"""Read-only access to a local repository mirror.

``Repository`` is the history source of the report: it lists commits and
tags, resolves tags to commits and reads tag and commit metadata. Every
method returns a Result; nothing here writes to the repository.

Usage:
    repo = Repository(Path("opentrons_repo"))

    match repo.list_tags(sort="-v:refname"):
        case Ok(names):
            for name in names[:10]:
                print(name, repo.resolve_tag_target(name))
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relwatch.core.result import Err, Ok, Result
from relwatch.platform.process import ProcessError
from relwatch.platform.process import run as run_process
from relwatch.report.models import CommitRecord, TagMetadata, parse_iso_date

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_LOG_TIMEOUT_SECONDS = 2 * 60.0

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"

# hash, author date, ref names, author name, author email, subject, body
_COMMIT_FORMAT = "%H%x1f%aI%x1f%D%x1f%an%x1f%ae%x1f%s%x1f%b%x1e"
_COMMIT_FIELDS = 7

_TAG_FORMAT = (
    "%(objecttype)%1f%(taggername)%1f%(taggeremail)%1f"
    "%(taggerdate:iso-strict)%1f%(contents:subject)"
)

__all__ = [
    "GitError",
    "Repository",
    "parse_commit_record",
    "parse_tag_metadata",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def _split_refs(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def parse_commit_record(raw: str) -> CommitRecord | None:
    """Parse one ``_COMMIT_FORMAT`` record; None if it is malformed."""
    record = raw.strip("\n").rstrip(_RECORD_SEP)
    if not record.strip():
        return None
    parts = record.split(_FIELD_SEP)
    if len(parts) < _COMMIT_FIELDS:
        return None
    sha, date_raw, refs, name, email, subject = (p.strip() for p in parts[:6])
    body = _FIELD_SEP.join(parts[6:]).strip()
    author_date = parse_iso_date(date_raw)
    if not sha or author_date is None:
        return None
    return CommitRecord(
        sha=sha,
        author_date=author_date,
        refs=_split_refs(refs),
        message=subject,
        author_name=name,
        author_email=email,
        body=body,
    )


def parse_tag_metadata(raw: str) -> TagMetadata | None:
    """Parse one ``_TAG_FORMAT`` line; None if the ref was not found."""
    line = raw.strip("\n")
    if not line.strip():
        return None
    parts = line.split(_FIELD_SEP)
    parts += [""] * (5 - len(parts))
    objecttype, name, email, date_raw, subject = (p.strip() for p in parts[:5])
    if objecttype != "tag":
        return TagMetadata(is_annotated=False)
    return TagMetadata(
        is_annotated=True,
        tagger_name=name or None,
        tagger_email=email.strip("<>") or None,
        tagger_date=parse_iso_date(date_raw),
        subject=subject or None,
    )


class Repository:
    """A local git mirror.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists() or (self.path / "HEAD").is_file()

    def list_commits(
        self,
        max_count: int,
        remote_pattern: str | None = None,
    ) -> Result[list[CommitRecord], GitError]:
        """List up to ``max_count`` commits, newest first.

        With ``remote_pattern`` the walk covers remote branches matching
        ``origin/<pattern>`` instead of HEAD. Malformed records are dropped.
        """
        args = ["log", f"--max-count={max_count}", f"--pretty=format:{_COMMIT_FORMAT}"]
        if remote_pattern:
            args.append(f"--remotes=origin/{remote_pattern}")
        result = self._run(args, timeout=_GIT_LOG_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(self._error("log", result.error, "git log failed"))

        commits: list[CommitRecord] = []
        for raw in result.value.split(_RECORD_SEP):
            commit = parse_commit_record(raw)
            if commit is not None:
                commits.append(commit)
        return Ok(commits)

    def list_tags(self, sort: str = "-v:refname") -> Result[list[str], GitError]:
        """List tag names in ``sort`` order (any ``git tag --sort`` key)."""
        result = self._run(["tag", "--list", f"--sort={sort}"])
        match result:
            case Err(e):
                return Err(self._error("tag --list", e, "git tag failed"))
            case Ok(stdout):
                return Ok([line.strip() for line in stdout.splitlines() if line.strip()])

    def resolve_tag_target(self, tag_name: str) -> Result[str, GitError]:
        """Resolve a tag, peeling annotated tag objects, to a commit sha."""
        result = self._run(["rev-parse", "--verify", f"refs/tags/{tag_name}^{{commit}}"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse", e, f"cannot resolve tag {tag_name}"))
            case Ok(stdout):
                sha = stdout.strip()
                if not sha:
                    return Err(GitError(command="rev-parse", message=f"empty sha for tag {tag_name}"))
                return Ok(sha)

    def read_tag_metadata(self, tag_name: str) -> Result[TagMetadata, GitError]:
        """Read tagger fields; lightweight tags come back non-annotated."""
        result = self._run(["for-each-ref", f"--format={_TAG_FORMAT}", f"refs/tags/{tag_name}"])
        if isinstance(result, Err):
            return Err(self._error("for-each-ref", result.error, f"cannot read tag {tag_name}"))
        metadata = parse_tag_metadata(result.value)
        if metadata is None:
            return Err(GitError(command="for-each-ref", message=f"tag not found: {tag_name}"))
        return Ok(metadata)

    def read_commit(self, sha: str) -> Result[CommitRecord, GitError]:
        result = self._run(["show", "--no-patch", f"--pretty=format:{_COMMIT_FORMAT}", sha])
        if isinstance(result, Err):
            return Err(self._error("show", result.error, f"cannot read commit {sha}"))
        commit = parse_commit_record(result.value)
        if commit is None:
            return Err(GitError(command="show", message=f"unparseable commit {sha}"))
        return Ok(commit)

    def _error(self, command: str, error: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=error.stderr.strip() or fallback,
            returncode=error.returncode,
        )

    def _run(self, args: list[str], *, timeout: float = _GIT_TIMEOUT_SECONDS) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
