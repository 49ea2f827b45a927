from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

ALL_PERMISSIONS = frozenset({
    "edit-users",
    "edit-skills",
    "edit-events",
    "edit-conferences",
    "edit-settings",
    "translate",
})

ROLE_PERMISSIONS = {
    "admin": ALL_PERMISSIONS,
    "translator": frozenset({"translate"}),
    "user": frozenset(),
}


@dataclass(frozen=True)
class RequestContext:
    """Who is acting in the current request. Passed explicitly to services."""
    user_uid: Optional[str] = None
    role: str = "anonymous"
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    def has_permission(self, action: str) -> bool:
        return action in self.permissions

    @classmethod
    def for_role(cls, user_uid: Optional[str], role: str) -> "RequestContext":
        return cls(user_uid=user_uid, role=role, permissions=ROLE_PERMISSIONS.get(role, frozenset()))


ANONYMOUS = RequestContext()
