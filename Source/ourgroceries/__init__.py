"""Client for the OurGroceries shopping-list web service.

Contains the session/login protocol, the command dispatcher and typed records
for the command responses.
"""

from .api import OurGroceriesClient  # re-export for convenience
from .auth import Authenticator, LoginObserver
from .credentials import Credentials
from .errors import (
    InvalidArgument,
    InvalidLogin,
    MalformedResponse,
    OurGroceriesError,
    PreconditionNotReady,
    Unreachable,
)
from .extractor import IdentifierExtractor, RegexIdentifierExtractor
from .models import CategoryItem, GroceryList, ListData, ListItem, ListOverview, NewListItem
from .session import LoginState, Session
from .transport import HttpTransport, Transport, TransportResponse

__version__ = "0.1.0"
__all__ = [
    "Authenticator",
    "CategoryItem",
    "Credentials",
    "GroceryList",
    "HttpTransport",
    "IdentifierExtractor",
    "InvalidArgument",
    "InvalidLogin",
    "ListData",
    "ListItem",
    "ListOverview",
    "LoginObserver",
    "LoginState",
    "MalformedResponse",
    "NewListItem",
    "OurGroceriesClient",
    "OurGroceriesError",
    "PreconditionNotReady",
    "RegexIdentifierExtractor",
    "Session",
    "Transport",
    "TransportResponse",
    "Unreachable",
]
