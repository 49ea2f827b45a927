from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..logs import LogContext
from ..domain.errors import NotFound
from ..domain.request import RequestContext
from ..services.conference_svc import get_conference_detail, list_conferences, save_conference, save_location
from ..services.event_svc import list_events
from .deps import http_error, request_context

router = APIRouter()


class ConferenceSave(BaseModel):
    current_uid: str | None = None  # None -> create
    uid: str | None = None
    title: str | None = None
    subtitle: str | None = None
    description: str | None = None
    start: dt.datetime | None = None
    end: dt.datetime | None = None
    location_uid: str | None = None


class LocationSave(BaseModel):
    uid: str
    name: str
    address: str | None = None
    lat: float | None = None
    lng: float | None = None


@router.get("/api/conference/list")
def api_conference_list():
    return {"items": list_conferences()}


@router.get("/api/conference/{uid}")
def api_conference_get(uid: str):
    try:
        return get_conference_detail(uid)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/api/conference/{uid}/events")
def api_conference_events(uid: str):
    try:
        return {"items": list_events(uid)}
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/conference/save")
def api_conference_save(body: ConferenceSave, ctx: RequestContext = Depends(request_context)):
    log = LogContext("SAVE_CONFERENCE", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        fields = body.dict(exclude={"current_uid"})
        conference = save_conference(ctx, body.current_uid, fields, log)
        log.write("OK")
        return {"message": "ok", "conference": conference}
    except Exception as e:
        raise http_error(log, e)


@router.post("/api/location/save")
def api_location_save(body: LocationSave, ctx: RequestContext = Depends(request_context)):
    log = LogContext("SAVE_LOCATION", ctx.user_uid)
    log.set_payload(body.dict())
    try:
        location = save_location(ctx, body.uid, body.name, body.address, body.lat, body.lng, log)
        log.write("OK")
        return {"message": "ok", "location": location}
    except Exception as e:
        raise http_error(log, e)
