"""Keep the local mirror of a repository up to date.

The report itself is read-only; this is the one place that touches disk,
and only inside the configured mirror directory.
"""

from __future__ import annotations

from pathlib import Path

from relwatch.core.result import Err, Ok, Result
from relwatch.git.repository import GitError, Repository
from relwatch.output.console import ConsoleProtocol, Style
from relwatch.platform.process import run as run_process

_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_GIT_CLONE_TIMEOUT_SECONDS = 30 * 60.0

# Fail instead of waiting on a credential prompt nobody will answer.
_NON_INTERACTIVE = {"GIT_TERMINAL_PROMPT": "0"}

__all__ = ["sync_mirror"]


def sync_mirror(url: str, local_path: Path, *, console: ConsoleProtocol) -> Result[Repository, GitError]:
    """Clone ``url`` into ``local_path`` if needed, then fetch everything."""
    repo = Repository(local_path)

    if not local_path.exists():
        console.print(f"Cloning {url} into {local_path}...", Style.DIM)
        local_path.parent.mkdir(parents=True, exist_ok=True)
        cloned = run_process(
            ["git", "clone", url, str(local_path)],
            cwd=local_path.parent,
            env=_NON_INTERACTIVE,
            timeout=_GIT_CLONE_TIMEOUT_SECONDS,
        )
        if isinstance(cloned, Err):
            return Err(
                GitError(
                    command="clone",
                    message=cloned.error.stderr.strip() or f"git clone failed: {url}",
                    returncode=cloned.error.returncode,
                )
            )
    elif not repo.exists():
        return Err(GitError(command="clone", message=f"{local_path} exists but is not a git repository"))

    console.print("Fetching...", Style.DIM)
    fetched = run_process(
        ["git", "-C", str(local_path), "fetch", "--all", "--tags", "--prune"],
        cwd=local_path,
        env=_NON_INTERACTIVE,
        timeout=_GIT_NETWORK_TIMEOUT_SECONDS,
    )
    if isinstance(fetched, Err):
        return Err(
            GitError(
                command="fetch",
                message=fetched.error.stderr.strip() or "git fetch failed",
                returncode=fetched.error.returncode,
            )
        )
    console.print("Done fetching.", Style.DIM)
    return Ok(repo)
