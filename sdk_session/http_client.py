"""HTTP transport used by AuthManager.

- `Request` describes one call: method, path, base URL, query params, JSON body.
- Any object with `execute(request) -> dict` can act as transport; tests pass stubs.
- `HttpTransport` is the default `requests` implementation. It returns the decoded
  JSON body and turns failures into TransportError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

import requests

from .errors import ERR_NETWORK, MalformedResponseError, TransportError


DEFAULT_TIMEOUT = 5


@dataclass
class Request:
    method: str
    url: str
    base_url: str
    params: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)

    def full_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.url.lstrip('/')}"


class Transport(Protocol):
    def execute(self, request: Request) -> Dict[str, Any]:
        ...


class HttpTransport:
    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def _send(self, request: Request) -> requests.Response:
        return requests.request(
            request.method.upper(),
            request.full_url(),
            headers={"Content-Type": "application/json", **request.headers},
            params=request.params or None,
            json=request.data or None,
            timeout=self.timeout,
        )

    def execute(self, request: Request) -> Dict[str, Any]:
        # Short-lived connections to some servers get reset now and then; one retry.
        try:
            try:
                resp = self._send(request)
            except requests.exceptions.ConnectionError:
                resp = self._send(request)
        except requests.exceptions.RequestException as exc:
            raise TransportError(ERR_NETWORK, "Network Error") from exc

        if resp.status_code >= 400:
            raise _error_from_response(resp)

        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError as exc:
            raise MalformedResponseError(request.url, resp.text) from exc
        if not isinstance(body, dict):
            raise MalformedResponseError(request.url, body)
        return body


def _error_from_response(resp: requests.Response) -> TransportError:
    data: Dict[str, Any] = {}
    if resp.content:
        try:
            parsed = resp.json()
            data = parsed if isinstance(parsed, dict) else {}
        except ValueError:
            data = {}
    error = data.get("error")
    if not isinstance(error, dict):
        error = {}
    code: Optional[Any] = error.get("code", data.get("code"))
    message = error.get("message") or data.get("message") or resp.reason or f"HTTP {resp.status_code}"
    return TransportError(code if code is not None else resp.status_code, message, status=resp.status_code)


__all__ = ["DEFAULT_TIMEOUT", "Request", "Transport", "HttpTransport"]
