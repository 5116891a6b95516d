"""HTTP client abstraction for the GitHub REST API.

This module provides:
- HttpClient: Protocol for JSON requests against the API (injectable for tests)
- RealHttpClient: Real implementation using urllib with a bearer token
- MockHttpClient: Route table implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from bumpr import __version__
from bumpr.core.result import Err, Ok, Result
from bumpr.core.structured import as_str_dict, get_str

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "MockCall",
    "HttpError",
    "Params",
]

Params = Mapping[str, str | int]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        method: HTTP method of the failed request
        url: The URL that failed
        status: HTTP status code (0 for network errors and timeouts)
        message: Human-readable error message (the API's ``message`` field when present)
    """

    method: str
    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.method} {self.url})"
        return f"{self.message} ({self.method} {self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for REST calls.

    Paths are API-relative (``/repos/{owner}/{repo}/...``). Every call is
    synchronous and returns the decoded JSON document.
    """

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Params | None = None,
        body: Mapping[str, object] | None = None,
    ) -> Result[object, HttpError]:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP method (GET, POST, PUT, ...)
            path: API-relative path
            params: Optional query parameters
            body: Optional JSON body

        Returns:
            Ok with the decoded JSON value, or Err with HttpError
        """
        ...


def _error_message(raw: bytes, fallback: str) -> str:
    """Extract the API's ``message`` field from an error body."""
    try:
        obj: object = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return fallback
    data = as_str_dict(obj)
    if data is None:
        return fallback
    return get_str(data, "message") or fallback


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - Bearer token authentication (omitted when no token is set)
    - JSON encoding of request bodies and decoding of responses
    - Timeout handling
    """

    def __init__(
        self,
        base_url: str = "https://api.github.com",
        token: str | None = None,
        timeout: float = 60.0,
        user_agent: str = f"bumpr/{__version__}",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def build_url(self, path: str, params: Params | None = None) -> str:
        url = f"{self.base_url}/{path.lstrip('/')}"
        if params:
            url += "?" + urllib.parse.urlencode({k: str(v) for k, v in params.items()})
        return url

    def _headers(self, *, has_body: bool) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Params | None = None,
        body: Mapping[str, object] | None = None,
    ) -> Result[object, HttpError]:
        url = self.build_url(path, params)
        data = json.dumps(dict(body)).encode("utf-8") if body is not None else None

        try:
            req = urllib.request.Request(
                url,
                data=data,
                method=method,
                headers=self._headers(has_body=data is not None),
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            message = _error_message(e.read(), str(e.reason))
            return Err(HttpError(method=method, url=url, status=e.code, message=message))
        except urllib.error.URLError as e:
            return Err(HttpError(method=method, url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(method=method, url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(method=method, url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(method=method, url=url, status=0, message=str(e)))

        if not raw:
            return Ok(None)

        try:
            return Ok(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(
                HttpError(method=method, url=url, status=0, message=f"JSON parse error: {e}")
            )


@dataclass(frozen=True, slots=True)
class MockCall:
    """A request recorded by MockHttpClient."""

    method: str
    path: str
    params: dict[str, str]
    body: dict[str, object] | None


_RouteKey = tuple[str, str, tuple[tuple[str, str], ...]]


def _freeze(params: Params | None) -> tuple[tuple[str, str], ...]:
    if not params:
        return ()
    return tuple(sorted((k, str(v)) for k, v in params.items()))


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are registered per (method, path), optionally narrowed by query
    parameters. A route registered with a list of responses serves them in
    order and repeats the last one. Unknown routes answer 404.

    Usage:
        client = MockHttpClient()
        client.set_json("GET", "/repos/o/r/tags", [{"name": "v1.0.0", ...}])
        result = client.request_json("GET", "/repos/o/r/tags", params={"per_page": 100})
    """

    calls: list[MockCall] = field(default_factory=lambda: [])
    _routes: dict[_RouteKey, list[object | HttpError]] = field(default_factory=lambda: {})

    def set_json(
        self,
        method: str,
        path: str,
        response: object | HttpError,
        *,
        params: Params | None = None,
    ) -> None:
        """Register a single response for a route."""
        self._routes[(method.upper(), path, _freeze(params))] = [response]

    def set_sequence(
        self,
        method: str,
        path: str,
        responses: list[object | HttpError],
        *,
        params: Params | None = None,
    ) -> None:
        """Register responses served one per call (last one repeats)."""
        self._routes[(method.upper(), path, _freeze(params))] = list(responses)

    def set_error(
        self,
        method: str,
        path: str,
        status: int,
        message: str,
        *,
        params: Params | None = None,
    ) -> None:
        self.set_json(
            method,
            path,
            HttpError(method=method.upper(), url=path, status=status, message=message),
            params=params,
        )

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Params | None = None,
        body: Mapping[str, object] | None = None,
    ) -> Result[object, HttpError]:
        method = method.upper()
        self.calls.append(
            MockCall(
                method=method,
                path=path,
                params={k: str(v) for k, v in (params or {}).items()},
                body=dict(body) if body is not None else None,
            )
        )

        queue = self._match(method, path, set(_freeze(params)))
        if queue is None:
            return Err(HttpError(method=method, url=path, status=404, message="Not Found (mock)"))

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def _match(
        self, method: str, path: str, params: set[tuple[str, str]]
    ) -> list[object | HttpError] | None:
        # Most specific route whose params are all present in the request wins.
        best: list[object | HttpError] | None = None
        best_size = -1
        for (m, p, route_params), queue in self._routes.items():
            if m != method or p != path:
                continue
            if not set(route_params) <= params:
                continue
            if len(route_params) > best_size:
                best, best_size = queue, len(route_params)
        return best

    # Test helper methods

    def calls_to(self, method: str, path: str | None = None) -> list[MockCall]:
        """Recorded calls for a method, optionally narrowed to one path."""
        method = method.upper()
        return [c for c in self.calls if c.method == method and (path is None or c.path == path)]

    @property
    def mutating_calls(self) -> list[MockCall]:
        return [c for c in self.calls if c.method in ("POST", "PUT", "PATCH", "DELETE")]
