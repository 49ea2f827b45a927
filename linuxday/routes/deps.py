from __future__ import annotations

from fastapi import Header, HTTPException

from ..logs import LogContext
from ..domain.errors import NotFound, PermissionDenied, ValidationFailure
from ..domain.request import RequestContext
from ..services.auth_svc import context_for_user


def request_context(x_ldto_user: str | None = Header(None)) -> RequestContext:
    """The acting user comes from the X-LDTO-User header set by the front proxy."""
    return context_for_user(x_ldto_user)


def http_error(log: LogContext | None, e: Exception) -> HTTPException:
    if isinstance(e, NotFound):
        status = 404
    elif isinstance(e, PermissionDenied):
        status = 403
    elif isinstance(e, ValidationFailure):
        status = 400
    else:
        if log is not None:
            log.write("ERROR", "internal error")
        raise e
    if log is not None:
        log.write("ERROR", str(e))
    return HTTPException(status_code=status, detail=str(e))
