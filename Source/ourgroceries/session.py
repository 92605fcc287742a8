"""Session state for one OurGroceries client."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LoginState(Enum):
    """Authentication flow states."""
    UNAUTHENTICATED = "unauthenticated"
    COOKIE_OBTAINED = "cookie_obtained"
    LOGGED_IN = "logged_in"
    FAILED = "failed"


@dataclass(frozen=True)
class Session:
    """Identifiers resolved at login.

    Instances are immutable; a login builds a new one and the client swaps it in
    whole, so a failed login never leaves a half-populated session behind.
    """
    session_present: bool = False
    team_id: Optional[str] = None
    master_list_id: Optional[str] = None
    category_list_id: Optional[str] = None

    @property
    def logged_in(self) -> bool:
        return self.session_present and bool(self.team_id) and bool(self.master_list_id)

    @classmethod
    def empty(cls) -> "Session":
        return cls()
