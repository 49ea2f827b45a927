from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..logs import LogContext
from ..domain.request import RequestContext
from ..services.auth_svc import require_permission
from ..services.config_svc import get_config, update_config
from .deps import http_error, request_context

router = APIRouter()


@router.get("/api/settings/get")
def api_settings_get():
    return get_config()


class SettingsUpdateBody(BaseModel):
    updates: dict


@router.post("/api/settings/update")
def api_settings_update(body: SettingsUpdateBody, ctx: RequestContext = Depends(request_context)):
    log = LogContext("SETTINGS_UPDATE", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        require_permission(ctx, "edit-settings", "Can't edit settings")
        updated_keys = update_config(body.updates, log)
        log.write("OK")
        return {"message": "ok", "updated": updated_keys}
    except Exception as e:
        raise http_error(log, e)
