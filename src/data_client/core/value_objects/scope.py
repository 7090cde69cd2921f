"""Scope value objects.

Every data client operation targets either the global collection of a
resource type or the collection owned by one user. The two cases are
distinct types so callers branch on the type, never on a missing id.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class GlobalScope:
    """Global (admin-managed) resources, not owned by any user."""

    @property
    def user_id(self) -> None:
        return None

    def __str__(self) -> str:
        return "global"


@dataclass(frozen=True)
class UserScope:
    """Resources owned by a single user."""
    user_id: str

    def __post_init__(self):
        if not isinstance(self.user_id, str) or not self.user_id.strip():
            raise ValueError(f"UserScope requires a non-empty user id, got: {self.user_id!r}")
        if self.user_id in (".", ".."):
            raise ValueError(f"UserScope user id cannot be the path segment {self.user_id!r}")

    def __str__(self) -> str:
        return f"user:{self.user_id}"


Scope = Union[GlobalScope, UserScope]

GLOBAL = GlobalScope()


def scope_from_user_id(user_id: Optional[str]) -> Scope:
    """Build a scope from an optional user id (None means global)."""
    if user_id is None:
        return GLOBAL
    return UserScope(user_id)
