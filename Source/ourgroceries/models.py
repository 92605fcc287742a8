"""
Typed records for OurGroceries command responses.

The service answers every command with plain JSON; these dataclasses cover the
shapes the client parses for callers. Field names follow the wire format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import MalformedResponse


@dataclass
class ListOverview:
    """One entry of the `getOverview` response."""
    id: str
    name: str = ""
    versionId: str = ""
    activeCount: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListOverview":
        raw_count = data.get("activeCount") or 0
        try:
            active_count = int(raw_count)
        except (TypeError, ValueError) as e:
            raise MalformedResponse(f"activeCount is not a number: {raw_count!r}", str(data)) from e
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            versionId=data.get("versionId") or "",
            activeCount=active_count,
        )


@dataclass
class ListItem:
    id: str
    name: str = ""
    value: str = ""
    categoryId: Optional[str] = None
    note: Optional[str] = None
    crossedOff: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListItem":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            value=data.get("value") or "",
            categoryId=data.get("categoryId"),
            note=data.get("note"),
            crossedOff=bool(data.get("crossedOff", False)),
        )


@dataclass
class GroceryList:
    id: str = ""
    name: str = ""
    notes: str = ""
    externalListAccess: str = ""
    versionId: str = ""
    listType: str = ""
    items: List[ListItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GroceryList":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            notes=data.get("notes") or "",
            externalListAccess=data.get("externalListAccess") or "",
            versionId=data.get("versionId") or "",
            listType=data.get("listType") or "",
            items=[ListItem.from_dict(i) for i in data.get("items") or [] if isinstance(i, dict)],
        )

    def find_item(self, value: str) -> Optional[ListItem]:
        """First item whose value matches, case-insensitively."""
        needle = value.strip().lower()
        for item in self.items:
            if item.value.strip().lower() == needle:
                return item
        return None


@dataclass
class ListData:
    """The `getList` response: `{"list": {...}}`."""
    list: GroceryList = field(default_factory=GroceryList)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListData":
        raw = data.get("list") if isinstance(data, dict) else None
        return cls(list=GroceryList.from_dict(raw) if isinstance(raw, dict) else GroceryList())


@dataclass
class CategoryItem:
    id: str
    name: str = ""
    value: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategoryItem":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            value=data.get("value") or "",
        )


@dataclass
class NewListItem:
    """Input record for `add_items_to_list`."""
    value: str
    category_id: Optional[str] = None
    note: Optional[str] = None

    def to_payload(self, list_id: str) -> Dict[str, Any]:
        return {
            "listId": list_id,
            "value": self.value,
            "categoryId": self.category_id,
            "note": self.note,
        }
