from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

BASE_URL = os.getenv("OURGROCERIES_BASE_URL", "https://www.ourgroceries.com")

# Endpoints
SIGN_IN_URL = os.getenv("OURGROCERIES_SIGN_IN_URL", f"{BASE_URL}/sign-in")
# The "your lists" page doubles as the command endpoint
YOUR_LISTS_URL = os.getenv("OURGROCERIES_YOUR_LISTS_URL", f"{BASE_URL}/your-lists/")

# Name of the cookie that carries the session. When unset, any non-empty cookie
# scoped to the service host is taken as proof of sign-in.
SESSION_COOKIE_NAME = os.getenv("OURGROCERIES_SESSION_COOKIE") or None

REQUEST_TIMEOUT = float(os.getenv("OURGROCERIES_TIMEOUT", "15"))

# Sign-in form
FORM_KEY_USERNAME = "emailAddress"
FORM_KEY_PASSWORD = "password"
FORM_KEY_ACTION = "action"
FORM_VALUE_ACTION = "sign-in"

# Command names (wire format, keep verbatim)
ACTION_GET_LIST = "getList"
ACTION_GET_LISTS = "getOverview"
ACTION_ITEM_CROSSED_OFF = "setItemCrossedOff"
ACTION_ITEM_ADD = "insertItem"
ACTION_ITEM_ADD_ITEMS = "insertItems"
ACTION_ITEM_REMOVE = "deleteItem"
ACTION_ITEM_RENAME = "changeItemValue"
ACTION_LIST_CREATE = "createList"
ACTION_LIST_REMOVE = "deleteList"
ACTION_LIST_RENAME = "renameList"
ACTION_GET_MASTER_LIST = "getMasterList"
ACTION_GET_CATEGORY_LIST = "getCategoryList"
ACTION_ITEM_CHANGE_VALUE = "changeItemValue"
ACTION_LIST_DELETE_ALL_CROSSED_OFF = "deleteAllCrossedOffItems"

KNOWN_COMMANDS = frozenset({
    ACTION_GET_LIST,
    ACTION_GET_LISTS,
    ACTION_ITEM_CROSSED_OFF,
    ACTION_ITEM_ADD,
    ACTION_ITEM_ADD_ITEMS,
    ACTION_ITEM_REMOVE,
    ACTION_ITEM_RENAME,
    ACTION_LIST_CREATE,
    ACTION_LIST_REMOVE,
    ACTION_LIST_RENAME,
    ACTION_GET_MASTER_LIST,
    ACTION_GET_CATEGORY_LIST,
    ACTION_LIST_DELETE_ALL_CROSSED_OFF,
})

# Default headers that mimic browser requests
DEFAULT_HEADERS = {
    "accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/139.0.0.0 Safari/537.36"
    ),
}


@dataclass(frozen=True)
class ServiceUrls:
    """Endpoints used by one client instance."""
    sign_in: str = SIGN_IN_URL
    your_lists: str = YOUR_LISTS_URL

    @property
    def command(self) -> str:
        return self.your_lists

    @property
    def origin(self) -> str:
        parts = urlparse(self.sign_in)
        return f"{parts.scheme}://{parts.netloc}"

    @classmethod
    def for_base_url(cls, base_url: str) -> "ServiceUrls":
        base = base_url.rstrip("/")
        return cls(sign_in=f"{base}/sign-in", your_lists=f"{base}/your-lists/")
