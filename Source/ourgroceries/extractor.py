"""Scrape service-assigned identifiers out of the "your lists" page.

The page embeds its state as JavaScript assignments::

    g_teamId = "T123";
    g_masterListUrl = "/your-lists/list/M99";
    g_staticMetalist = [{"id": "C1", "listType": "CATEGORY", ...}, ...];

All functions here are pure and return None when the value is not found; the
caller decides whether a missing value is fatal.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional, Protocol


logger = logging.getLogger(__name__)

CATEGORY_LIST_TYPE = "CATEGORY"

TEAM_ID_RE = re.compile(r'g_teamId\s*=\s*"([^"]*)"\s*;')
MASTER_LIST_ID_RE = re.compile(r'g_masterListUrl\s*=\s*"/your-lists/list/([^"\s]*)"')
STATIC_METALIST_RE = re.compile(r"g_staticMetalist\s*=\s*(?=\[)")

_decoder = json.JSONDecoder()


def extract_team_id(html: str) -> Optional[str]:
    m = TEAM_ID_RE.search(html or "")
    return m.group(1) if m and m.group(1) else None


def extract_master_list_id(html: str) -> Optional[str]:
    m = MASTER_LIST_ID_RE.search(html or "")
    return m.group(1) if m and m.group(1) else None


def extract_static_metalist(html: str) -> Optional[List[Any]]:
    """Return the decoded `g_staticMetalist` array, or None.

    The literal is decoded straight from the page text with `raw_decode`, so
    nested arrays or a `];` inside a string value do not cut it short.
    """
    m = STATIC_METALIST_RE.search(html or "")
    if not m:
        return None
    try:
        value, end = _decoder.raw_decode(html, m.end())
    except json.JSONDecodeError as e:
        logger.debug("g_staticMetalist is not valid JSON: %s", e)
        return None
    if not isinstance(value, list):
        return None
    if not html[end:].lstrip().startswith(";"):
        logger.debug("g_staticMetalist literal is not terminated by ';'")
        return None
    return value


def extract_category_list_id(html: str) -> Optional[str]:
    metalist = extract_static_metalist(html)
    if not metalist:
        return None
    for entry in metalist:
        if isinstance(entry, dict) and entry.get("listType") == CATEGORY_LIST_TYPE:
            list_id = entry.get("id")
            return str(list_id) if list_id else None
    return None


class IdentifierExtractor(Protocol):
    """Strategy for pulling identifiers out of the "your lists" page."""

    def team_id(self, html: str) -> Optional[str]: ...

    def master_list_id(self, html: str) -> Optional[str]: ...

    def category_list_id(self, html: str) -> Optional[str]: ...


class RegexIdentifierExtractor:
    """Default extractor, matching the JavaScript assignments with regexes."""

    def team_id(self, html: str) -> Optional[str]:
        return extract_team_id(html)

    def master_list_id(self, html: str) -> Optional[str]:
        return extract_master_list_id(html)

    def category_list_id(self, html: str) -> Optional[str]:
        return extract_category_list_id(html)
