"""HTTP transport for the GitHub REST API.

``HttpClient`` is the seam between the API wrapper and the network:
``RealHttpClient`` issues GETs with urllib, ``MockHttpClient`` answers from
canned bodies. Both only implement ``get_text``; JSON decoding is shared.
"""

from __future__ import annotations

import http.client
import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Protocol, cast, runtime_checkable

from relwatch import __version__
from relwatch.core.result import Err, Ok, Result
from relwatch.core.structured import ObjList, as_obj_list, as_str_dict

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "decode_array",
    "decode_object",
]

GITHUB_API_VERSION = "2022-11-28"


@dataclass(frozen=True, slots=True)
class HttpError:
    """A GET that did not produce a usable body.

    ``status`` is the HTTP status code, or 0 when no response arrived or the
    body could not be decoded.
    """

    url: str
    status: int
    message: str

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    def __str__(self) -> str:
        if self.status == 0:
            return f"GET {self.url}: {self.message}"
        return f"GET {self.url}: {self.status} {self.message}"


def _load(url: str, text: str) -> Result[object, HttpError]:
    try:
        return Ok(json.loads(text))
    except json.JSONDecodeError as e:
        return Err(HttpError(url=url, status=0, message=f"invalid JSON: {e}"))


def decode_object(url: str, text: str) -> Result[dict[str, Any], HttpError]:
    """Decode a response body that must be a JSON object."""
    loaded = _load(url, text)
    if isinstance(loaded, Err):
        return loaded
    data = as_str_dict(loaded.value)
    if data is None:
        return Err(HttpError(url=url, status=0, message="expected a JSON object"))
    return Ok(cast(dict[str, Any], data))


def decode_array(url: str, text: str) -> Result[ObjList, HttpError]:
    """Decode a response body that must be a JSON array."""
    loaded = _load(url, text)
    if isinstance(loaded, Err):
        return loaded
    items = as_obj_list(loaded.value)
    if items is None:
        return Err(HttpError(url=url, status=0, message="expected a JSON array"))
    return Ok(items)


@runtime_checkable
class HttpClient(Protocol):
    def get_text(self, url: str) -> Result[str, HttpError]:
        """GET ``url`` and return the body as text."""
        ...

    def get_json(self, url: str) -> Result[dict[str, Any], HttpError]:
        """GET ``url`` and decode a JSON object."""
        ...


class _JsonOverText:
    def get_text(self, url: str) -> Result[str, HttpError]:
        raise NotImplementedError

    def get_json(self, url: str) -> Result[dict[str, Any], HttpError]:
        text = self.get_text(url)
        if isinstance(text, Err):
            return text
        return decode_object(url, text.value)


class RealHttpClient(_JsonOverText):
    """urllib client for api.github.com (or a GitHub Enterprise API root).

    The token travels as a bearer credential on every request. Each request
    has its own timeout; nothing is retried.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        timeout: float = 30.0,
        user_agent: str = f"relwatch/{__version__}",
    ) -> None:
        self.timeout = timeout
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._headers = headers
        self._tls = ssl.create_default_context()

    def get_text(self, url: str) -> Result[str, HttpError]:
        request = urllib.request.Request(url, headers=self._headers, method="GET")
        try:
            with urllib.request.urlopen(request, timeout=self.timeout, context=self._tls) as response:
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message=f"timed out after {self.timeout}s"))
        except http.client.HTTPException as e:
            return Err(HttpError(url=url, status=0, message=f"{type(e).__name__}: {e}"))
        except (OSError, ValueError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        try:
            return Ok(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"body is not UTF-8: {e}"))


class MockHttpClient(_JsonOverText):
    """Canned bodies keyed by URL; any other URL answers 404.

    Usage:
        http = MockHttpClient()
        http.respond("https://api.github.com/repos/o/r/pulls/1", {"html_url": "..."})
        GitHubClient(http).get_pull_request("o", "r", 1)
    """

    def __init__(self) -> None:
        self._bodies: dict[str, str | HttpError] = {}
        self.requested: list[str] = []

    def respond(self, url: str, body: object) -> None:
        """Register ``body`` for ``url``.

        Strings are served as-is, an ``HttpError`` is returned as the
        failure, and anything else is JSON-encoded.
        """
        if isinstance(body, (str, HttpError)):
            self._bodies[url] = body
        else:
            self._bodies[url] = json.dumps(body)

    def get_text(self, url: str) -> Result[str, HttpError]:
        self.requested.append(url)
        match self._bodies.get(url):
            case None:
                return Err(HttpError(url=url, status=404, message="Not Found"))
            case HttpError() as error:
                return Err(error)
            case str() as body:
                return Ok(body)
