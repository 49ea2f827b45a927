from __future__ import annotations

from fastapi import APIRouter, Depends

from ..logs import search_logs
from ..domain.request import RequestContext
from ..services.auth_svc import require_permission
from .deps import http_error, request_context

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    page: int = 1,
    size: int = 20,
    action: str | None = None,
    query: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
    user: str | None = None,
    entity_type: str | None = None,
    ctx: RequestContext = Depends(request_context),
):
    try:
        require_permission(ctx, "edit-settings", "Can't read the operation log")
    except Exception as e:
        raise http_error(None, e)
    total, items = search_logs(query, action, ts_from, ts_to, page, size, user=user, entity_type=entity_type)
    return {"total": total, "items": items}
