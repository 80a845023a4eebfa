"""GitHub REST access: credentials, HTTP transport and typed endpoints."""

from .access import CredentialError, GitHubAccess
from .api import GitHubClient, RemoteTag
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "CredentialError",
    "GitHubAccess",
    "GitHubClient",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "RemoteTag",
]
