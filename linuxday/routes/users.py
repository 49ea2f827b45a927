from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..logs import LogContext
from ..domain.errors import NotFound
from ..domain.request import RequestContext
from ..services.user_svc import add_user_skill, change_user_skill, get_user_detail, list_users, save_user
from .deps import http_error, request_context

router = APIRouter()


class UserSave(BaseModel):
    current_uid: str | None = None  # None -> create
    name: str
    surname: str
    uid: str


class UserSkillAdd(BaseModel):
    user_uid: str
    skill_uid: str
    skill_score: int = 0


class UserSkillChange(BaseModel):
    user_uid: str
    skill_uid: str
    skill_score: int = 0
    delete: bool = False


@router.get("/api/user/list")
def api_user_list():
    return {"items": list_users()}


@router.get("/api/user/{uid}")
def api_user_get(uid: str):
    try:
        return get_user_detail(uid)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/user/save")
def api_user_save(body: UserSave, ctx: RequestContext = Depends(request_context)):
    log = LogContext("SAVE_USER", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        user = save_user(ctx, body.current_uid, body.name, body.surname, body.uid, log)
        log.write("OK")
        return {"message": "ok", "user": user}
    except Exception as e:
        raise http_error(log, e)


@router.post("/api/user/skill/add")
def api_user_skill_add(body: UserSkillAdd, ctx: RequestContext = Depends(request_context)):
    log = LogContext("ADD_USER_SKILL", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        skills = add_user_skill(ctx, body.user_uid, body.skill_uid, body.skill_score, log)
        log.write("OK")
        return {"message": "ok", "skills": skills}
    except Exception as e:
        raise http_error(log, e)


@router.post("/api/user/skill/change")
def api_user_skill_change(body: UserSkillChange, ctx: RequestContext = Depends(request_context)):
    log = LogContext("CHANGE_USER_SKILL", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        skills = change_user_skill(ctx, body.user_uid, body.skill_uid, body.skill_score, body.delete, log)
        log.write("OK")
        return {"message": "ok", "skills": skills}
    except Exception as e:
        raise http_error(log, e)
