"""Shared fixtures: an in-memory stand-in for the OurGroceries service."""

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from urllib.parse import urlparse

import pytest

from ourgroceries import OurGroceriesClient
from ourgroceries import logging_utils
from ourgroceries.transport import TransportResponse

USERNAME = "someone@somewhere.com"
PASSWORD = "s3cret-pa55"

YOUR_LISTS_HTML = """<!DOCTYPE html>
<html><head><title>Your Lists</title>
<script type="text/javascript">
    var g_userName = "someone";
    g_teamId = "T123";
    g_masterListUrl = "/your-lists/list/M99";
    g_staticMetalist = [{"id":"S1","listType":"SHOPPING","name":"Groceries"},{"id":"C7","listType":"CATEGORY","name":"Categories"}];
</script>
</head><body><div id="lists"></div></body></html>
"""

NO_CATEGORY_HTML = YOUR_LISTS_HTML.replace('"listType":"CATEGORY"', '"listType":"RECIPES"')

Reply = Union[str, Exception, Callable[[Dict[str, Any]], str]]


class FakeTransport:
    """Scripted `Transport`: a cookie dict per host plus canned replies per command."""

    def __init__(self, page: str = YOUR_LISTS_HTML, set_cookie: bool = True, sign_in_delay: float = 0.0):
        self.page = page
        self.set_cookie = set_cookie
        self.sign_in_delay = sign_in_delay
        self.cookies: Dict[str, str] = {}
        self.replies: Dict[str, Reply] = {}
        self.default_reply: str = "{}"
        self.sign_in_forms: List[Dict[str, str]] = []
        self.page_requests: List[str] = []
        self.commands: List[Dict[str, Any]] = []
        self.command_urls: List[str] = []
        self._lock = threading.Lock()

    @property
    def sign_in_count(self) -> int:
        return len(self.sign_in_forms)

    def submit_form(self, url: str, fields: Mapping[str, str]) -> TransportResponse:
        with self._lock:
            self.sign_in_forms.append(dict(fields))
        if self.sign_in_delay:
            time.sleep(self.sign_in_delay)
        if self.set_cookie:
            self.cookies[urlparse(url).hostname] = "session-token"
        return TransportResponse(200, "<html>Welcome</html>")

    def get_page(self, url: str) -> TransportResponse:
        self.page_requests.append(url)
        return TransportResponse(200, self.page)

    def post_json(self, url: str, payload: Mapping[str, Any]) -> TransportResponse:
        body = dict(payload)
        with self._lock:
            self.commands.append(body)
            self.command_urls.append(url)
        reply = self.replies.get(body.get("command"), self.default_reply)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(body)
        return TransportResponse(200, reply)

    def has_session_cookie(self, url: str) -> bool:
        return bool(self.cookies.get(urlparse(url).hostname))


def reply_json(data: Any) -> str:
    return json.dumps(data)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> OurGroceriesClient:
    return OurGroceriesClient(USERNAME, PASSWORD, transport=transport)


@pytest.fixture
def logged_in_client(client: OurGroceriesClient) -> OurGroceriesClient:
    client.login()
    return client


@pytest.fixture
def isolated_logger(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_utils, "_LOG_DIR", str(tmp_path / "logs"))
    logger = logging.getLogger(logging_utils.LOGGER_NAME)
    saved = list(logger.handlers), logger.level
    logger.handlers = []
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers, level = saved
    logger.setLevel(level)


def last_command(transport: FakeTransport) -> Optional[Dict[str, Any]]:
    return transport.commands[-1] if transport.commands else None
