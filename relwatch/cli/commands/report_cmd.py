"""report command - categorized tag report from the local mirrors."""

from __future__ import annotations

from pathlib import Path

import typer

from relwatch.cli.context import build_context
from relwatch.core.config import DEFAULT_CONFIG_FILE, RepoConfig
from relwatch.core.result import Result
from relwatch.output.console import ConsoleProtocol
from relwatch.report.pipeline import ReportError, report_error_code, run_repo_report, run_reports


def report(
    config: Path = typer.Option(Path(DEFAULT_CONFIG_FILE), "--config", "-c", help="Path to the TOML config."),
    repo: list[str] = typer.Option([], "--repo", "-r", help="Only report on this repository (repeatable)."),
    no_fetch: bool = typer.Option(False, "--no-fetch", help="Use the local mirrors as they are."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show per-tag diagnostics."),
) -> None:
    """Report recent tags per category and commits since the last release."""
    ctx = build_context(config_path=config, repo_names=repo, require_github=False)

    def pipeline(repo_config: RepoConfig, console: ConsoleProtocol) -> Result[None, ReportError]:
        return run_repo_report(
            repo_config,
            config=ctx.config,
            github=ctx.github,
            console=console,
            fetch=not no_fetch,
            verbose=verbose,
        )

    errors = run_reports(ctx.repos, pipeline, console=ctx.console)
    if errors:
        raise typer.Exit(code=int(max(report_error_code(e) for e in errors)))
