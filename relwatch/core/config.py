"""Typed configuration loading.

The config file is TOML with one ``[[repos]]`` table per repository to
report on, plus optional ``[github]`` and ``[issues]`` tables:

    [github]
    token_env = ["GT", "GITHUB_TOKEN"]
    concurrency = 8

    [issues]
    base_url = "https://opentrons.atlassian.net/browse/"
    exclude = ["OT-2", "OT-3"]

    [[repos]]
    url = "https://github.com/Opentrons/opentrons.git"
    local_path = "opentrons_repo"
    tag_pattern = "^(v|ot3|docs|components|protocol-designer)"
    release_branch_pattern = "chore_release*"
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_float,
    get_int,
    get_list,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "Config",
    "ConfigError",
    "GitHubSettings",
    "IssueSettings",
    "RepoConfig",
    "RepoSlug",
    "DEFAULT_CONFIG_FILE",
    "default_config",
    "load_config",
    "load_config_or_default",
    "parse_repo_url",
]

DEFAULT_CONFIG_FILE = "relwatch.toml"

DEFAULT_TOKEN_ENV = ("GT", "GITHUB_TOKEN")
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CONCURRENCY = 8
DEFAULT_TIMEOUT_SECONDS = 30.0

DEFAULT_ISSUE_BASE_URL = "https://opentrons.atlassian.net/browse/"
# Too generic to point at a real ticket ("OT-2" is a robot model name).
DEFAULT_ISSUE_EXCLUDE = ("OT-2", "OT-3")

DEFAULT_CATEGORY_SIZE = 3
DEFAULT_MAX_TAGS = 1000
DEFAULT_MAX_COMMITS = 100
DEFAULT_RECENT_TAGS = 5

_GITHUB_URL_RE = re.compile(
    r"^(?:https://github\.com/|git@github\.com:)([^/\s]+)/([^/\s]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or validated."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RepoSlug:
    """Owner/name pair derived from a repository URL."""

    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def web_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.name}"


def parse_repo_url(url: str) -> Result[RepoSlug, ConfigError]:
    """Derive the owner/repo pair from a GitHub clone URL.

    Accepts ``https://github.com/<owner>/<repo>[.git]`` and
    ``git@github.com:<owner>/<repo>[.git]``.
    """
    m = _GITHUB_URL_RE.match(url.strip())
    if m is None:
        return Err(ConfigError(f"Could not parse GitHub URL: {url!r}"))
    return Ok(RepoSlug(owner=m.group(1), name=m.group(2)))


@dataclass(frozen=True, slots=True)
class GitHubSettings:
    token_env: tuple[str, ...] = DEFAULT_TOKEN_ENV
    api_url: str = DEFAULT_API_URL
    concurrency: int = DEFAULT_CONCURRENCY
    timeout: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class IssueSettings:
    base_url: str = DEFAULT_ISSUE_BASE_URL
    exclude: tuple[str, ...] = DEFAULT_ISSUE_EXCLUDE


@dataclass(frozen=True, slots=True)
class RepoConfig:
    """One repository to report on.

    Exactly one of ``tag_pattern`` / ``tag_prefixes`` decides categories.
    """

    url: str
    slug: RepoSlug
    local_path: Path
    tag_pattern: str | None = None
    tag_prefixes: tuple[str, ...] = ()
    release_branch_pattern: str | None = None
    category_size: int = DEFAULT_CATEGORY_SIZE
    max_tags: int = DEFAULT_MAX_TAGS
    max_commits: int = DEFAULT_MAX_COMMITS
    recent_tags: int = DEFAULT_RECENT_TAGS

    @property
    def name(self) -> str:
        return self.slug.name

    @property
    def needs_pull_requests(self) -> bool:
        return self.release_branch_pattern is not None


@dataclass(frozen=True, slots=True)
class Config:
    repos: tuple[RepoConfig, ...]
    github: GitHubSettings = field(default_factory=GitHubSettings)
    issues: IssueSettings = field(default_factory=IssueSettings)

    def select(self, names: list[str]) -> Result[tuple[RepoConfig, ...], ConfigError]:
        """Pick repositories by name (all of them when ``names`` is empty)."""
        if not names:
            return Ok(self.repos)
        by_name = {r.name.lower(): r for r in self.repos}
        picked: list[RepoConfig] = []
        for n in names:
            repo = by_name.get(n.strip().lower())
            if repo is None:
                available = ", ".join(r.name for r in self.repos)
                return Err(ConfigError(f"Unknown repository: {n} (available: {available})"))
            picked.append(repo)
        return Ok(tuple(picked))


def _positive(value: int | None, default: int) -> int:
    if value is None or value <= 0:
        return default
    return value


def _parse_repo(data: Mapping[str, object], index: int, base_dir: Path) -> Result[RepoConfig, ConfigError]:
    url = get_str(data, "url")
    if url is None:
        return Err(ConfigError(f"repos[{index}]: missing 'url'"))

    slug = parse_repo_url(url)
    if isinstance(slug, Err):
        return Err(ConfigError(f"repos[{index}]: {slug.error.message}"))

    tag_pattern = get_str(data, "tag_pattern")
    tag_prefixes = tuple(get_str_list(data, "tag_prefixes") or [])
    if tag_pattern is None and not tag_prefixes:
        return Err(ConfigError(f"repos[{index}]: set 'tag_pattern' or 'tag_prefixes'"))
    if tag_pattern is not None and tag_prefixes:
        return Err(ConfigError(f"repos[{index}]: 'tag_pattern' and 'tag_prefixes' are exclusive"))
    if tag_pattern is not None:
        try:
            re.compile(tag_pattern)
        except re.error as e:
            return Err(ConfigError(f"repos[{index}]: invalid tag_pattern: {e}"))

    local = get_str(data, "local_path") or f"{slug.value.name}_repo"
    local_path = Path(local).expanduser()
    if not local_path.is_absolute():
        local_path = base_dir / local_path

    return Ok(
        RepoConfig(
            url=url,
            slug=slug.value,
            local_path=local_path,
            tag_pattern=tag_pattern,
            tag_prefixes=tag_prefixes,
            release_branch_pattern=get_str(data, "release_branch_pattern"),
            category_size=_positive(get_int(data, "category_size"), DEFAULT_CATEGORY_SIZE),
            max_tags=_positive(get_int(data, "max_tags"), DEFAULT_MAX_TAGS),
            max_commits=_positive(get_int(data, "max_commits"), DEFAULT_MAX_COMMITS),
            recent_tags=_positive(get_int(data, "recent_tags"), DEFAULT_RECENT_TAGS),
        )
    )


def config_from_dict(data: Mapping[str, object], *, base_dir: Path) -> Result[Config, ConfigError]:
    """Build and validate a Config from parsed TOML."""
    github: StrDict = get_table(data, "github") or {}
    issues: StrDict = get_table(data, "issues") or {}

    token_env = get_str_list(github, "token_env")
    exclude = get_str_list(issues, "exclude")
    concurrency = _positive(get_int(github, "concurrency"), DEFAULT_CONCURRENCY)
    timeout = get_float(github, "timeout")

    repos_raw = get_list(data, "repos")
    if not repos_raw:
        return Err(ConfigError("Config must define at least one [[repos]] table"))

    repos: list[RepoConfig] = []
    for i, item in enumerate(repos_raw):
        table = as_str_dict(item)
        if table is None:
            return Err(ConfigError(f"repos[{i}]: expected a table"))
        parsed = _parse_repo(table, i, base_dir)
        if isinstance(parsed, Err):
            return parsed
        repos.append(parsed.value)

    return Ok(
        Config(
            repos=tuple(repos),
            github=GitHubSettings(
                token_env=tuple(token_env) if token_env else DEFAULT_TOKEN_ENV,
                api_url=(get_str(github, "api_url") or DEFAULT_API_URL).rstrip("/"),
                concurrency=concurrency,
                timeout=timeout if timeout and timeout > 0 else DEFAULT_TIMEOUT_SECONDS,
            ),
            issues=IssueSettings(
                base_url=get_str(issues, "base_url") or DEFAULT_ISSUE_BASE_URL,
                exclude=tuple(e.upper() for e in exclude) if exclude is not None else DEFAULT_ISSUE_EXCLUDE,
            ),
        )
    )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration from a TOML file.

    Relative ``local_path`` values resolve against the config file's
    directory.
    """
    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    result = config_from_dict(parsed.value, base_dir=path.parent)
    if isinstance(result, Err):
        return Err(ConfigError(result.error.message, path=path))
    return result


def default_config(base_dir: Path) -> Config:
    """Built-in config used when no config file exists."""
    result = config_from_dict(
        {
            "repos": [
                {
                    "url": "https://github.com/Opentrons/opentrons.git",
                    "local_path": "opentrons_repo",
                    "tag_pattern": "^(v|ot3|docs|components|protocol-designer)",
                    "release_branch_pattern": "chore_release*",
                }
            ]
        },
        base_dir=base_dir,
    )
    if isinstance(result, Err):
        raise AssertionError(f"built-in config is invalid: {result.error.message}")
    return result.value


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load ``path``, falling back to the built-in config if it is missing.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(default_config(path.parent))
    return load_config(path)
