from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..logs import LogContext
from ..domain.errors import NotFound
from ..domain.request import RequestContext
from ..services.event_svc import add_event_speaker, get_event_detail, remove_event_speaker, save_event, subscribe
from .deps import http_error, request_context

router = APIRouter()


class EventSave(BaseModel):
    conference_uid: str
    current_uid: str | None = None  # None -> create
    uid: str | None = None
    title: str | None = None
    subtitle: str | None = None
    img: str | None = None
    start: dt.datetime | None = None
    end: dt.datetime | None = None
    description: str | None = None
    abstract: str | None = None
    note: str | None = None
    language: str | None = None
    subscriptions: bool | None = None


class EventSpeaker(BaseModel):
    conference_uid: str
    event_uid: str
    user_uid: str
    order: int = 0


class EventSubscribe(BaseModel):
    conference_uid: str
    event_uid: str
    email: str


@router.get("/api/event/{conference_uid}/{event_uid}")
def api_event_get(conference_uid: str, event_uid: str, ctx: RequestContext = Depends(request_context)):
    try:
        return get_event_detail(ctx, conference_uid, event_uid)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/event/save")
def api_event_save(body: EventSave, ctx: RequestContext = Depends(request_context)):
    log = LogContext("SAVE_EVENT", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        fields = body.dict(exclude={"conference_uid", "current_uid"})
        event = save_event(ctx, body.conference_uid, body.current_uid, fields, log)
        log.write("OK")
        return {"message": "ok", "event": event}
    except Exception as e:
        raise http_error(log, e)


@router.post("/api/event/speaker/add")
def api_event_speaker_add(body: EventSpeaker, ctx: RequestContext = Depends(request_context)):
    log = LogContext("ADD_EVENT_SPEAKER", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        speakers = add_event_speaker(ctx, body.conference_uid, body.event_uid, body.user_uid, body.order, log)
        log.write("OK")
        return {"message": "ok", "speakers": speakers}
    except Exception as e:
        raise http_error(log, e)


@router.post("/api/event/speaker/remove")
def api_event_speaker_remove(body: EventSpeaker, ctx: RequestContext = Depends(request_context)):
    log = LogContext("REMOVE_EVENT_SPEAKER", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        n = remove_event_speaker(ctx, body.conference_uid, body.event_uid, body.user_uid, log)
        log.write("OK")
        return {"message": "ok", "removed": n}
    except Exception as e:
        raise http_error(log, e)


@router.post("/api/event/subscribe")
def api_event_subscribe(body: EventSubscribe, ctx: RequestContext = Depends(request_context)):
    log = LogContext("SUBSCRIBE_EVENT", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        existed = subscribe(body.conference_uid, body.event_uid, body.email, log)
        log.write("OK")
        return {"message": "ok", "existed": existed}
    except Exception as e:
        raise http_error(log, e)
