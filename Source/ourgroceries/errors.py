"""Error taxonomy for the OurGroceries client.

Every error raised by the client derives from `OurGroceriesError` so callers
can catch the whole family at once and still tell login problems apart from
transport or payload problems.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class OurGroceriesError(Exception):
    """Base error class for client errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON output."""
        result: Dict[str, Any] = {"error": self.message, "type": type(self).__name__}
        if self.details:
            result["details"] = self.details
        return result


class InvalidArgument(OurGroceriesError, ValueError):
    """A constructor or operation received an unusable argument."""


class InvalidLogin(OurGroceriesError):
    """Sign-in or identifier extraction failed; `reason` says which step."""

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Login failed: {reason}", details)
        self.reason = reason


class Unreachable(OurGroceriesError):
    """The service could not be reached (connection, DNS, timeout, TLS)."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, {"url": url} if url else None)
        self.url = url


class MalformedResponse(OurGroceriesError):
    """The response body was not the JSON document the caller needed."""

    def __init__(self, message: str, body: str = ""):
        snippet = body[:200] + ("..." if len(body) > 200 else "")
        super().__init__(message, {"body": snippet} if snippet else None)


class PreconditionNotReady(OurGroceriesError):
    """An operation needed a session identifier that is not resolved."""
