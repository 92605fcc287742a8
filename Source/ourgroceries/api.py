from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .auth import Authenticator, LoginObserver
from .config import (
    ACTION_GET_CATEGORY_LIST,
    ACTION_GET_LIST,
    ACTION_GET_LISTS,
    ACTION_ITEM_ADD,
    ACTION_ITEM_ADD_ITEMS,
    ACTION_ITEM_CHANGE_VALUE,
    ACTION_ITEM_CROSSED_OFF,
    ACTION_ITEM_REMOVE,
    ACTION_LIST_CREATE,
    ACTION_LIST_DELETE_ALL_CROSSED_OFF,
    ACTION_LIST_REMOVE,
    ACTION_LIST_RENAME,
    KNOWN_COMMANDS,
    ServiceUrls,
)
from .credentials import Credentials
from .errors import InvalidArgument, MalformedResponse, OurGroceriesError, PreconditionNotReady
from .extractor import IdentifierExtractor
from .models import CategoryItem, ListData, ListOverview, NewListItem
from .session import LoginState, Session
from .transport import HttpTransport, Transport


logger = logging.getLogger(__name__)

NOT_LOGGED_IN = "not yet logged in"


class OurGroceriesClient:
    """Thin client for the OurGroceries web service.

    Every operation is a JSON command POSTed to the "your lists" endpoint. The
    first command on a fresh client logs in on demand; concurrent callers share
    one login.
    """

    def __init__(self, username: str, password: str, transport: Optional[Transport] = None,
                 extractor: Optional[IdentifierExtractor] = None, base_url: Optional[str] = None):
        self._credentials = Credentials(username, password)
        self._urls = ServiceUrls.for_base_url(base_url) if base_url else ServiceUrls()
        self._transport: Transport = transport or HttpTransport(urls=self._urls)
        self._auth = Authenticator(self._credentials, self._transport, extractor, self._urls)
        self._session = Session.empty()
        self._login_lock = threading.Lock()
        # Bumped after every login attempt; waiters compare it to share a failure
        self._login_generation = 0
        self._last_login_error: Optional[OurGroceriesError] = None

    # --- Session ---
    @property
    def username(self) -> str:
        return self._credentials.username

    @property
    def session(self) -> Session:
        return self._session

    @property
    def logged_in(self) -> bool:
        return self._session.logged_in

    @property
    def login_state(self) -> LoginState:
        """State of the committed session; a failed re-login keeps LOGGED_IN."""
        if self._session.logged_in:
            return LoginState.LOGGED_IN
        return self._auth.state

    @property
    def team_id(self) -> Optional[str]:
        return self._session.team_id

    @property
    def master_list_id(self) -> Optional[str]:
        return self._session.master_list_id

    @property
    def category_list_id(self) -> Optional[str]:
        return self._session.category_list_id

    def add_login_observer(self, observer: LoginObserver) -> None:
        self._auth.add_observer(observer)

    def login(self) -> Session:
        """Log in (again) and initialize the session."""
        with self._login_lock:
            return self._login_locked()

    def ensure_logged_in(self) -> Session:
        """Log in unless a session already exists; waits for a login in progress."""
        session = self._session
        if session.logged_in:
            return session
        generation = self._login_generation
        with self._login_lock:
            # Another caller may have finished logging in while we waited
            if self._session.logged_in:
                return self._session
            if generation != self._login_generation and self._last_login_error is not None:
                raise self._last_login_error
            return self._login_locked()

    def _login_locked(self) -> Session:
        try:
            session = self._auth.login()
        except OurGroceriesError as e:
            self._last_login_error = e
            self._login_generation += 1
            raise
        self._last_login_error = None
        self._login_generation += 1
        self._session = session
        return session

    # --- Dispatch ---
    def dispatch(self, command: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Send one command and return the parsed JSON response.

        Merge order is command, then teamId, then caller params (caller wins).
        """
        if not command:
            raise InvalidArgument("command must be a non-empty string")
        session = self.ensure_logged_in()

        payload: Dict[str, Any] = {"command": command}
        if session.team_id:
            payload["teamId"] = session.team_id
        if params:
            payload.update(params)

        if command not in KNOWN_COMMANDS:
            logger.warning("Dispatching unrecognized command %s", command)
        logger.debug("Dispatching command %s", command)
        resp = self._transport.post_json(self._urls.command, payload)
        return resp.json()

    def _require(self, value: Optional[str], what: str) -> str:
        if not value:
            raise PreconditionNotReady(f"{what} not initialized: {NOT_LOGGED_IN}")
        return value

    # --- Lists ---
    def get_my_lists(self) -> List[ListOverview]:
        """Gets all grocery lists for the user."""
        logger.debug("Getting user lists")
        response = self.dispatch(ACTION_GET_LISTS)
        lists = response.get("shoppingLists") if isinstance(response, dict) else None
        if not isinstance(lists, list):
            return []
        return [ListOverview.from_dict(entry) for entry in lists if isinstance(entry, dict)]

    def get_list_items(self, list_id: str) -> ListData:
        """Gets items from a specific list."""
        logger.debug("Getting items for list %s", list_id)
        response = self.dispatch(ACTION_GET_LIST, {"listId": list_id})
        if not isinstance(response, dict):
            raise MalformedResponse("getList response is not a JSON object", str(response))
        return ListData.from_dict(response)

    def create_list(self, name: str, list_type: str = "SHOPPING") -> str:
        """Creates a new list and returns its id."""
        logger.debug("Creating list: %s", name)
        response = self.dispatch(ACTION_LIST_CREATE, {"name": name, "listType": list_type.upper()})
        list_id = response.get("listId") if isinstance(response, dict) else None
        if not list_id:
            raise MalformedResponse("createList response has no listId", str(response))
        return list_id

    def rename_list(self, list_id: str, name: str) -> Any:
        logger.debug("Renaming list %s to %s", list_id, name)
        return self.dispatch(ACTION_LIST_RENAME, {"listId": list_id, "name": name})

    def delete_list(self, list_id: str) -> Any:
        logger.debug("Deleting list %s", list_id)
        self.ensure_logged_in()
        team_id = self._require(self.team_id, "Team ID")
        return self.dispatch(ACTION_LIST_REMOVE, {"listId": list_id, "teamId": team_id})

    def delete_all_crossed_off_from_list(self, list_id: str) -> Any:
        logger.debug("Deleting all crossed off items from list %s", list_id)
        return self.dispatch(ACTION_LIST_DELETE_ALL_CROSSED_OFF, {"listId": list_id})

    def get_master_list(self) -> Any:
        logger.debug("Getting master list")
        self.ensure_logged_in()
        master_list_id = self._require(self.master_list_id, "Master list ID")
        return self.dispatch(ACTION_GET_LIST, {"listId": master_list_id})

    def get_category_list(self) -> Any:
        logger.debug("Getting category list")
        self.ensure_logged_in()
        team_id = self._require(self.team_id, "Team ID")
        return self.dispatch(ACTION_GET_CATEGORY_LIST, {"teamId": team_id})

    # --- Categories ---
    def get_category_items(self) -> List[CategoryItem]:
        """Gets the items of the category list, i.e. the category names."""
        logger.debug("Getting category items")
        self.ensure_logged_in()
        category_list_id = self._require(self.category_list_id, "Category ID")
        response = self.dispatch(ACTION_GET_LIST, {"listId": category_list_id})
        raw_list = response.get("list") if isinstance(response, dict) else None
        items = raw_list.get("items") if isinstance(raw_list, dict) else None
        if not isinstance(items, list):
            return []
        return [CategoryItem.from_dict(i) for i in items if isinstance(i, dict)]

    def create_category(self, name: str) -> Any:
        logger.debug("Creating category: %s", name)
        self.ensure_logged_in()
        category_list_id = self._require(self.category_list_id, "Category ID")
        return self.dispatch(ACTION_ITEM_ADD, {"value": name, "listId": category_list_id})

    # --- Items ---
    def toggle_item_crossed_off(self, list_id: str, item_id: str, cross_off: bool = False) -> Any:
        logger.debug("Toggling item %s crossed off status to %s", item_id, cross_off)
        return self.dispatch(ACTION_ITEM_CROSSED_OFF, {
            "listId": list_id,
            "itemId": item_id,
            "crossedOff": cross_off,
        })

    def add_item_to_list(self, list_id: str, value: str, category: str = "uncategorized",
                         auto_category: bool = False, note: Optional[str] = None) -> Any:
        """Adds a single item to a list.

        With `auto_category` the service picks the category itself, so no
        `categoryId` is sent.
        """
        logger.debug("Adding item '%s' to list %s", value, list_id)
        payload: Dict[str, Any] = {"listId": list_id, "value": value, "note": note or ""}
        if not auto_category:
            payload["categoryId"] = category
        return self.dispatch(ACTION_ITEM_ADD, payload)

    def add_items_to_list(self, list_id: str, items: Iterable[NewListItem]) -> Any:
        logger.debug("Adding multiple items to list %s", list_id)
        return self.dispatch(ACTION_ITEM_ADD_ITEMS, {"items": [item.to_payload(list_id) for item in items]})

    def add_item_to_master_list(self, value: str, category_id: str) -> Any:
        logger.debug("Adding item '%s' to master list", value)
        self.ensure_logged_in()
        master_list_id = self._require(self.master_list_id, "Master list ID")
        return self.dispatch(ACTION_ITEM_ADD, {
            "listId": master_list_id,
            "value": value,
            "categoryId": category_id,
        })

    def remove_item_from_list(self, list_id: str, item_id: str) -> Any:
        logger.debug("Removing item %s from list %s", item_id, list_id)
        return self.dispatch(ACTION_ITEM_REMOVE, {"listId": list_id, "itemId": item_id})

    def change_item_on_list(self, list_id: str, item_id: str, category_id: str, value: str) -> Any:
        logger.debug("Changing item %s on list %s", item_id, list_id)
        self.ensure_logged_in()
        team_id = self._require(self.team_id, "Team ID")
        return self.dispatch(ACTION_ITEM_CHANGE_VALUE, {
            "itemId": item_id,
            "listId": list_id,
            "newValue": value,
            "categoryId": category_id,
            "teamId": team_id,
        })

    def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "OurGroceriesClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
