"""HTTP transport with a persistent cookie jar.

The session cookie set at sign-in is the only proof of authentication the
service hands out, so the transport keeps it inside its jar and replays it on
every later request. Callers can ask whether the cookie is there but never see
its value.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol
from urllib.parse import urlparse

import requests

from .config import DEFAULT_HEADERS, REQUEST_TIMEOUT, SESSION_COOKIE_NAME, ServiceUrls
from .errors import MalformedResponse, Unreachable


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    status: int
    body: str

    def json(self) -> Any:
        try:
            return json.loads(self.body)
        except (json.JSONDecodeError, TypeError) as e:
            raise MalformedResponse(f"Invalid JSON response (HTTP {self.status}): {e}", self.body) from e


class Transport(Protocol):
    """What the client needs from an HTTP layer."""

    def submit_form(self, url: str, fields: Mapping[str, str]) -> TransportResponse: ...

    def get_page(self, url: str) -> TransportResponse: ...

    def post_json(self, url: str, payload: Mapping[str, Any]) -> TransportResponse: ...

    def has_session_cookie(self, url: str) -> bool: ...


def _host_matches(host: str, cookie_domain: str) -> bool:
    domain = cookie_domain.lstrip(".").lower()
    if not domain:
        return False
    return host == domain or host.endswith("." + domain)


class HttpTransport:
    """`Transport` backed by a single `requests.Session`.

    Status codes are reported back, not raised on: the sign-in endpoint signals
    success through cookies only, and the command endpoint is judged by its body.
    """

    def __init__(self, timeout: float = REQUEST_TIMEOUT, session: Optional[requests.Session] = None,
                 cookie_name: Optional[str] = SESSION_COOKIE_NAME, urls: Optional[ServiceUrls] = None):
        self.timeout = timeout
        self.cookie_name = cookie_name
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)
        origin = (urls or ServiceUrls()).origin
        self.session.headers.update({"origin": origin, "referer": f"{origin}/"})

    def submit_form(self, url: str, fields: Mapping[str, str]) -> TransportResponse:
        return self._request("post", url, data=dict(fields))

    def get_page(self, url: str) -> TransportResponse:
        return self._request("get", url)

    def post_json(self, url: str, payload: Mapping[str, Any]) -> TransportResponse:
        return self._request("post", url, json=dict(payload))

    def has_session_cookie(self, url: str) -> bool:
        host = (urlparse(url).hostname or "").lower()
        for cookie in self.session.cookies:
            if self.cookie_name and cookie.name != self.cookie_name:
                continue
            if cookie.value and _host_matches(host, cookie.domain or ""):
                return True
        return False

    def close(self) -> None:
        self.session.close()

    # --- Core request ---
    def _request(self, method: str, url: str, data: Any = None, json: Any = None) -> TransportResponse:
        try:
            resp = self.session.request(method, url, data=data, json=json, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise Unreachable(f"Request timed out after {self.timeout} seconds", url) from e
        except requests.exceptions.RequestException as e:
            raise Unreachable(f"Connection error: {e}", url) from e
        if resp.status_code >= 400:
            logger.warning("%s %s -> HTTP %s", method.upper(), url, resp.status_code)
        else:
            logger.debug("%s %s -> HTTP %s", method.upper(), url, resp.status_code)
        return TransportResponse(status=resp.status_code, body=resp.text or "")
