from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..logs import LogContext
from ..domain.request import RequestContext
from ..services.skill_svc import create_skill, list_skills
from .deps import http_error, request_context

router = APIRouter()


class SkillCreate(BaseModel):
    uid: str
    phrase: str | None = None
    type: str | None = None


@router.get("/api/skill/list")
def api_skill_list():
    return {"items": list_skills()}


@router.post("/api/skill/create", status_code=201)
def api_skill_create(body: SkillCreate, ctx: RequestContext = Depends(request_context)):
    log = LogContext("CREATE_SKILL", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        new_id = create_skill(ctx, body.uid, body.phrase, body.type, log)
        log.write("OK")
        return {"message": "ok", "id": new_id}
    except Exception as e:
        raise http_error(log, e)
