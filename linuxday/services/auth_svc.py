from __future__ import annotations

from ..domain.entities import User
from ..domain.errors import PermissionDenied
from ..domain.request import ANONYMOUS, RequestContext


def context_for_user(user_uid: str | None) -> RequestContext:
    """Build the request context of a (trusted) user UID. Unknown users are anonymous."""
    if not user_uid:
        return ANONYMOUS
    user = User.factory_from_uid(user_uid).query_row()
    if user is None:
        return ANONYMOUS
    return RequestContext.for_role(user.uid, user.role)


def require_permission(ctx: RequestContext, action: str, message: str | None = None) -> None:
    if not ctx.has_permission(action):
        raise PermissionDenied(message or f"missing permission '{action}'")
