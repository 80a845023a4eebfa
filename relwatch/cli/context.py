from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from relwatch.core.config import Config, RepoConfig, load_config_or_default
from relwatch.core.errors import ErrorCode
from relwatch.core.result import Err
from relwatch.github.access import GitHubAccess
from relwatch.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    repos: tuple[RepoConfig, ...]
    github: GitHubAccess | None
    console: ConsoleProtocol


def exit_with(message: str, *, code: ErrorCode, hint: str | None = None) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    if hint:
        typer.echo(f"hint: {hint}", err=True)
    raise typer.Exit(code=int(code))


def build_context(
    *,
    config_path: Path,
    repo_names: list[str],
    require_github: bool,
) -> CLIContext:
    """Load config, select repositories and check the credential.

    Everything that can make the run fail as a whole is checked here,
    before any git or network call.
    """
    loaded = load_config_or_default(config_path)
    if isinstance(loaded, Err):
        exit_with(loaded.error.message, code=ErrorCode.CONFIG_ERROR)
    config = loaded.value

    selected = config.select(repo_names)
    if isinstance(selected, Err):
        exit_with(selected.error.message, code=ErrorCode.USER_ERROR)
    repos = selected.value

    github: GitHubAccess | None = None
    if require_github or any(r.needs_pull_requests for r in repos):
        access = GitHubAccess.from_env(config.github)
        if isinstance(access, Err):
            exit_with(access.error.message, code=ErrorCode.CONFIG_ERROR, hint=access.error.hint)
        github = access.value

    return CLIContext(config=config, repos=repos, github=github, console=RichConsole())
