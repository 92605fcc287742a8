"""
Authentication flow for the OurGroceries web service.

The service has no token endpoint. Logging in means submitting the HTML sign-in
form, checking that a session cookie came back, then scraping the team id,
master list id and category list id from the "your lists" page:

    UNAUTHENTICATED -> COOKIE_OBTAINED -> LOGGED_IN
                 \\              \\
                  +-> FAILED     +-> FAILED

Any failure raises `InvalidLogin` with the reason; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .config import (
    FORM_KEY_ACTION,
    FORM_KEY_PASSWORD,
    FORM_KEY_USERNAME,
    FORM_VALUE_ACTION,
    ServiceUrls,
)
from .credentials import Credentials
from .errors import InvalidLogin
from .extractor import IdentifierExtractor, RegexIdentifierExtractor
from .session import LoginState, Session
from .transport import Transport


logger = logging.getLogger(__name__)

REASON_NO_COOKIE = "no session cookie"
REASON_NO_TEAM_ID = "no team id"
REASON_NO_MASTER_LIST_ID = "no master list id"


class LoginObserver:
    """Interface for login state observers."""

    def on_login_state_changed(self, state: LoginState, message: str = "") -> None:
        """Called when the authentication flow changes state."""
        pass


class Authenticator:
    """Runs the sign-in flow and produces a populated `Session`.

    The authenticator does not store the session; `login()` returns it and the
    owning client commits it. This keeps a failed attempt from touching the
    session the client already holds.
    """

    def __init__(self, credentials: Credentials, transport: Transport,
                 extractor: Optional[IdentifierExtractor] = None,
                 urls: Optional[ServiceUrls] = None):
        self._credentials = credentials
        self._transport = transport
        self._extractor = extractor or RegexIdentifierExtractor()
        self._urls = urls or ServiceUrls()
        self._state = LoginState.UNAUTHENTICATED
        self._observers: List[LoginObserver] = []

    @property
    def state(self) -> LoginState:
        return self._state

    def add_observer(self, observer: LoginObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: LoginObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def login(self) -> Session:
        """Run the whole flow; return the resolved session or raise `InvalidLogin`."""
        self._set_state(LoginState.UNAUTHENTICATED)
        try:
            self._obtain_session_cookie()
            self._set_state(LoginState.COOKIE_OBTAINED)
            session = self._resolve_identifiers()
        except InvalidLogin as e:
            self._set_state(LoginState.FAILED, e.reason)
            raise
        except Exception as e:
            self._set_state(LoginState.FAILED, str(e))
            raise
        self._set_state(LoginState.LOGGED_IN)
        logger.debug("OurGroceries logged in successfully")
        return session

    # --- Steps ---
    def _obtain_session_cookie(self) -> None:
        logger.debug("Getting session cookie")
        fields = {
            FORM_KEY_USERNAME: self._credentials.username,
            FORM_KEY_PASSWORD: self._credentials.password,
            FORM_KEY_ACTION: FORM_VALUE_ACTION,
        }
        self._transport.submit_form(self._urls.sign_in, fields)
        if not self._transport.has_session_cookie(self._urls.sign_in):
            logger.error("Could not find session cookie")
            raise InvalidLogin(REASON_NO_COOKIE)
        logger.debug("Found session cookie")

    def _resolve_identifiers(self) -> Session:
        logger.debug("Getting team ID")
        page = self._transport.get_page(self._urls.your_lists)
        html = page.body

        team_id = self._extractor.team_id(html)
        if not team_id:
            raise InvalidLogin(REASON_NO_TEAM_ID, {"status": page.status})
        logger.debug("Found team ID: %s", team_id)

        # Category support is optional on the service side
        category_list_id = self._extractor.category_list_id(html)
        if category_list_id:
            logger.debug("Found category ID: %s", category_list_id)
        else:
            logger.warning("Could not find category list ID; category operations will be unavailable")

        logger.debug("Getting master list ID")
        master_list_id = self._extractor.master_list_id(html)
        if not master_list_id:
            raise InvalidLogin(REASON_NO_MASTER_LIST_ID, {"status": page.status})
        logger.debug("Found master list ID: %s", master_list_id)

        return Session(
            session_present=True,
            team_id=team_id,
            master_list_id=master_list_id,
            category_list_id=category_list_id,
        )

    def _set_state(self, state: LoginState, message: str = "") -> None:
        """Set login state and notify observers."""
        if self._state == state:
            return
        old_state = self._state
        self._state = state
        logger.info(f"Login state changed: {old_state.value} -> {state.value}")
        for observer in self._observers:
            try:
                observer.on_login_state_changed(state, message)
            except Exception as e:
                logger.error(f"Observer notification failed: {e}")
