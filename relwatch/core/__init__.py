"""Core types shared by every relwatch layer."""

from .concurrency import bounded_map
from .config import Config, ConfigError, GitHubSettings, IssueSettings, RepoConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # concurrency
    "bounded_map",
    # config
    "Config",
    "ConfigError",
    "GitHubSettings",
    "IssueSettings",
    "RepoConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
