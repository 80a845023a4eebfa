"""Run-scoped GitHub credential and client handle.

The token is read once from the environment when the run starts; a missing
token stops the run before any git or network call. The HTTP client is
built on first use and shared by every repository pipeline of the run.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass

from relwatch.core.config import GitHubSettings
from relwatch.core.result import Err, Ok, Result
from relwatch.github.api import GitHubClient
from relwatch.github.http import HttpClient, RealHttpClient

__all__ = ["CredentialError", "GitHubAccess"]


@dataclass(frozen=True, slots=True)
class CredentialError:
    message: str
    hint: str | None = None


class GitHubAccess:
    """Token plus a lazily built, shared ``GitHubClient``."""

    def __init__(self, token: str, settings: GitHubSettings, http: HttpClient | None = None) -> None:
        self._token = token
        self.settings = settings
        self._http = http
        self._client: GitHubClient | None = None
        self._client_lock = threading.Lock()

    @classmethod
    def from_env(
        cls,
        settings: GitHubSettings,
        env: Mapping[str, str] | None = None,
    ) -> Result[GitHubAccess, CredentialError]:
        """Read the first non-empty variable named in ``settings.token_env``."""
        source = os.environ if env is None else env
        for name in settings.token_env:
            token = (source.get(name) or "").strip()
            if token:
                return Ok(cls(token, settings))
        names = ", ".join(settings.token_env)
        return Err(
            CredentialError(
                message="GitHub token not found",
                hint=f"Export one of: {names}",
            )
        )

    @property
    def client(self) -> GitHubClient:
        """The run's client, built by whichever pipeline asks first."""
        with self._client_lock:
            if self._client is None:
                http = self._http or RealHttpClient(self._token, timeout=self.settings.timeout)
                self._client = GitHubClient(http, api_url=self.settings.api_url)
            return self._client
