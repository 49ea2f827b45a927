from __future__ import annotations

from typing import Any

from ..db import get_conn
from ..logs import LogContext
from ..domain.attributes import to_datetime
from ..domain.entities import Conference, FullConference, Location
from ..domain.errors import NotFound, ValidationFailure
from ..domain.record import DBCol
from ..domain.request import RequestContext
from ..domain.traits import conference_url, location_has_geo
from .auth_svc import require_permission
from .config_svc import get_config

# body field -> (column, kind)
_FIELDS = {
    "uid": (Conference.UID, "s"),
    "title": (Conference.TITLE, "s"),
    "subtitle": (Conference.SUBTITLE, "s"),
    "description": (Conference.DESCRIPTION, "s"),
    "start": (Conference.START, "t"),
    "end": (Conference.END, "t"),
}


def conference_dict(conf: Conference, base_url: str) -> dict:
    out = conf.as_dict()
    out["url"] = conference_url(conf, base_url)
    out["has_geo"] = location_has_geo(conf)
    return out


def list_conferences() -> list[dict]:
    base = get_config()["site_url"]
    q = FullConference.factory().order_by(Conference.START, desc=True)
    return [conference_dict(c, base) for c in q.query_generator()]


def load_conference(uid: str, conn=None) -> FullConference:
    conf = FullConference.factory_from_uid(uid, conn).query_row()
    if not conf:
        raise NotFound("Conference not found")
    return conf


def get_conference_detail(uid: str) -> dict:
    return conference_dict(load_conference(uid), get_config()["site_url"])


def check_bounds(fields: dict[str, Any], current, start_col: str, end_col: str, what: str):
    """Reject an end before the start, comparing against stored values for bounds not given."""
    start = fields.get("start")
    end = fields.get("end")
    if start is None and current is not None:
        start = current.get(start_col)
    if end is None and current is not None:
        end = current.get(end_col)
    if start is not None and end is not None and to_datetime(end) < to_datetime(start):
        raise ValidationFailure(f"{what} ends before it starts")


def save_conference(ctx: RequestContext, current_uid: str | None, fields: dict[str, Any], log: LogContext) -> dict:
    """
    Create a conference or update the given fields of an existing one.
    Fields set to None are left untouched on update.
    """
    require_permission(ctx, "edit-conferences", "Can't edit conferences")
    data = [DBCol(col, fields[k], kind) for k, (col, kind) in _FIELDS.items() if fields.get(k) is not None]

    with get_conn() as conn:
        location_uid = fields.get("location_uid")
        if location_uid is not None:
            loc = Location.factory_from_uid(location_uid, conn).query_row()
            if not loc:
                raise NotFound(f"Location '{location_uid}' not found")
            data.append(DBCol(Location.ID, loc.id, "d"))

        conf = load_conference(current_uid, conn) if current_uid else None
        check_bounds(fields, conf, Conference.START, Conference.END, "conference")

        new_uid = fields.get("uid")
        if new_uid is not None and new_uid != current_uid:
            if Conference.factory_from_uid(new_uid, conn).query_row():
                raise ValidationFailure(f"conference uid '{new_uid}' already taken")

        if conf:
            log.set_before(conf.as_dict())
            Conference.factory_by_id(conf.id, conn).update(data)
            conf_id = conf.id
        else:
            conf_id = Conference.insert_row(data, conn)

        after = FullConference.factory_by_id(conf_id, conn).query_row()
    log.set_entity("CONFERENCE", conf_id)
    log.set_after(after.as_dict())
    return conference_dict(after, get_config()["site_url"])


def save_location(ctx: RequestContext, uid: str, name: str, address: str | None,
                  lat: float | None, lng: float | None, log: LogContext) -> dict:
    """Insert or update a location by UID."""
    require_permission(ctx, "edit-conferences", "Can't edit locations")
    data = [
        DBCol(Location.UID, uid),
        DBCol(Location.NAME, name),
        DBCol(Location.ADDRESS, address),
        DBCol(Location.LAT, lat, "f"),
        DBCol(Location.LNG, lng, "f"),
    ]
    with get_conn() as conn:
        loc = Location.factory_from_uid(uid, conn).query_row()
        if loc:
            log.set_before(loc.as_dict())
            Location.factory_by_id(loc.id, conn).update(data)
            loc_id = loc.id
        else:
            loc_id = Location.insert_row(data, conn)
        after = Location.factory_by_id(loc_id, conn).query_row()
    log.set_entity("LOCATION", loc_id)
    log.set_after(after.as_dict())
    return after.as_dict()
