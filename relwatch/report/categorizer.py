"""Per-category retention of the most recent tagged commits."""

from __future__ import annotations

from collections.abc import Iterable

from relwatch.core.config import RepoConfig
from relwatch.report.models import CategoryRule, PrefixCategoryRule, RegexCategoryRule, TagCommit

__all__ = ["categorize", "rule_for"]


def rule_for(repo: RepoConfig) -> CategoryRule:
    """Category rule configured for ``repo`` (regex wins over prefixes)."""
    if repo.tag_pattern is not None:
        return RegexCategoryRule.compile(repo.tag_pattern)
    return PrefixCategoryRule(repo.tag_prefixes)


def categorize(
    tag_commits: Iterable[TagCommit],
    rule: CategoryRule,
    size: int,
) -> dict[str, list[TagCommit]]:
    """Keep the ``size`` most recent distinct commits per category.

    Every tag of every commit is matched, so a commit can appear under
    several categories. Lists are ordered newest first; equal dates keep
    insertion order, so an equally old newcomer never displaces a kept
    entry. Categories appear in the order they are first matched.
    """
    by_category: dict[str, list[TagCommit]] = {}
    if size <= 0:
        return by_category
    for commit in tag_commits:
        for tag in commit.tags:
            category = rule(tag)
            if category is None:
                continue
            kept = by_category.setdefault(category, [])
            if any(c.sha == commit.sha for c in kept):
                continue
            if len(kept) >= size and commit.date <= kept[-1].date:
                continue
            kept.append(commit)
            kept.sort(key=lambda c: c.date, reverse=True)
            del kept[size:]
    return by_category
