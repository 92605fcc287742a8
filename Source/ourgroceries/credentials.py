from __future__ import annotations

from dataclasses import dataclass, field

from .errors import InvalidArgument


@dataclass(frozen=True)
class Credentials:
    """Username/password pair used for the sign-in form.

    The password is excluded from repr so it never ends up in logs.
    """
    username: str
    password: str = field(repr=False)

    def __post_init__(self) -> None:
        for name in ("username", "password"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise InvalidArgument(f"{name} must be a non-empty string")
