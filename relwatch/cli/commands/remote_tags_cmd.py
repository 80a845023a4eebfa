"""remote-tags command - tag overview straight from the GitHub API."""

from __future__ import annotations

from pathlib import Path

import typer

from relwatch.cli.context import build_context
from relwatch.core.config import DEFAULT_CONFIG_FILE, RepoConfig
from relwatch.core.result import Result
from relwatch.output.console import ConsoleProtocol
from relwatch.report.pipeline import ReportError, report_error_code, run_remote_tag_report, run_reports


def remote_tags(
    config: Path = typer.Option(Path(DEFAULT_CONFIG_FILE), "--config", "-c", help="Path to the TOML config."),
    repo: list[str] = typer.Option([], "--repo", "-r", help="Only report on this repository (repeatable)."),
    per_category: int = typer.Option(5, "--per-category", "-n", min=1, help="Tags kept per category."),
) -> None:
    """List the newest tags per category from GitHub, grouped by commit."""
    ctx = build_context(config_path=config, repo_names=repo, require_github=True)
    github = ctx.github
    assert github is not None

    def pipeline(repo_config: RepoConfig, console: ConsoleProtocol) -> Result[None, ReportError]:
        return run_remote_tag_report(
            repo_config,
            config=ctx.config,
            github=github,
            console=console,
            per_category=per_category,
        )

    errors = run_reports(ctx.repos, pipeline, console=ctx.console)
    if errors:
        raise typer.Exit(code=int(max(report_error_code(e) for e in errors)))
