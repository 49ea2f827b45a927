from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any

from ..db import get_conn, transaction
from ..logs import LogContext
from ..domain.entities import Conference, Event, EventUser, FullEvent, Subscription, User
from ..domain.errors import NotFound, ValidationFailure
from ..domain.record import DBCol
from ..domain.request import RequestContext
from ..domain import traits
from .auth_svc import require_permission
from .conference_svc import check_bounds, load_conference
from .config_svc import get_config

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# body field -> (column, kind)
_FIELDS = {
    "uid": (Event.UID, "s"),
    "title": (Event.TITLE, "s"),
    "subtitle": (Event.SUBTITLE, "s"),
    "img": (Event.IMAGE, "s"),
    "start": (Event.START, "t"),
    "end": (Event.END, "t"),
    "description": (Event.DESCRIPTION, "s"),
    "abstract": (Event.ABSTRACT, "s"),
    "note": (Event.NOTE, "s"),
    "language": (Event.LANGUAGE, "s"),
    "subscriptions": (Event.SUBSCRIPTIONS, "b"),
}


def event_summary(event: Event, base_url: str, now: dt.datetime | None = None) -> dict:
    out = event.as_dict()
    out["human_start"] = traits.event_human_start(event, now)
    out["is_passed"] = traits.is_event_passed(event, now)
    out["url"] = traits.event_url(event, base_url) if traits.has_event_permalink(event) else None
    out["image_url"] = traits.event_image_url(event, base_url) if traits.has_event_image(event) else None
    return out


def load_event(conference_uid: str, event_uid: str, conn=None) -> FullEvent:
    conference = load_conference(conference_uid, conn)
    event = FullEvent.factory_from_conference_and_event_uid(conference, event_uid, conn).query_row()
    if not event:
        raise NotFound("Event not found")
    return event


def list_events(conference_uid: str, now: dt.datetime | None = None) -> list[dict]:
    base = get_config()["site_url"]
    with get_conn() as conn:
        conference = load_conference(conference_uid, conn)
        q = FullEvent.factory_by_conference(conference.id, conn)
        return [event_summary(e, base, now) for e in q.query_generator()]


def get_event_detail(ctx: RequestContext, conference_uid: str, event_uid: str, now: dt.datetime | None = None) -> dict:
    base = get_config()["site_url"]
    with get_conn() as conn:
        event = load_event(conference_uid, event_uid, conn)
        out = event_summary(event, base, now)
        out["human_end"] = traits.event_human_end(event, now)
        out["subscriptions_available"] = traits.are_event_subscriptions_available(event, now)
        out["editable"] = traits.is_event_editable(ctx)
        out["speakers"] = [
            {"user_uid": u.uid, "fullname": traits.user_fullname(u), "order": u.get(EventUser.ORDER)}
            for u in traits.users_of_event(event, conn).query_generator()
        ]
        out["sharables"] = [s.as_dict() for s in traits.sharables_of_event(event, conn).query_generator()]
        return out


def save_event(ctx: RequestContext, conference_uid: str, current_uid: str | None,
               fields: dict[str, Any], log: LogContext) -> dict:
    """
    Create an event in a conference, or update the given fields of one.
    Fields set to None are not written.
    """
    require_permission(ctx, "edit-events", "Can't edit events")
    data = [DBCol(col, fields[k], kind) for k, (col, kind) in _FIELDS.items() if fields.get(k) is not None]

    with get_conn() as conn:
        conference = load_conference(conference_uid, conn)
        event = load_event(conference_uid, current_uid, conn) if current_uid else None
        check_bounds(fields, event, Event.START, Event.END, "event")

        new_uid = fields.get("uid")
        if new_uid is not None and new_uid != current_uid:
            if Event.factory_from_conference_and_event_uid(conference, new_uid, conn).query_row():
                raise ValidationFailure(f"event uid '{new_uid}' already taken")

        if event:
            log.set_before(event.as_dict())
            Event.factory_by_id(event.id, conn).update(data)
            event_id = event.id
        else:
            data.append(DBCol(Conference.ID, conference.id, "d"))
            event_id = Event.insert_row(data, conn)

        after = FullEvent.factory_by_id(event_id, conn).query_row()
    logger.info("event %s saved in %s", after.uid, conference_uid)
    log.set_entity("EVENT", event_id)
    log.set_after(after.as_dict())
    return event_summary(after, get_config()["site_url"])


def add_event_speaker(ctx: RequestContext, conference_uid: str, event_uid: str,
                      user_uid: str, order: int, log: LogContext) -> list[dict]:
    require_permission(ctx, "edit-events", "Can't edit events")
    with get_conn() as conn:
        event = load_event(conference_uid, event_uid, conn)
        user = User.factory_from_uid(user_uid, conn).query_row()
        if not user:
            raise NotFound(f"User '{user_uid}' not found")
        with transaction(conn):
            EventUser.factory(conn).where_column(Event.ID, event.id).where_column(User.ID, user.id).delete()
            EventUser.insert_row([
                DBCol(Event.ID, event.id, "d"),
                DBCol(User.ID, user.id, "d"),
                DBCol(EventUser.ORDER, order, "d"),
            ], conn)
        speakers = [u.uid for u in traits.users_of_event(event, conn).query_generator()]
    log.set_entity("EVENT", event.id)
    log.set_after({"speakers": speakers})
    return speakers


def remove_event_speaker(ctx: RequestContext, conference_uid: str, event_uid: str,
                         user_uid: str, log: LogContext) -> int:
    require_permission(ctx, "edit-events", "Can't edit events")
    with get_conn() as conn:
        event = load_event(conference_uid, event_uid, conn)
        user = User.factory_from_uid(user_uid, conn).query_row()
        if not user:
            raise NotFound(f"User '{user_uid}' not found")
        n = EventUser.factory(conn).where_column(Event.ID, event.id).where_column(User.ID, user.id).delete()
    log.set_entity("EVENT", event.id)
    log.set_after({"removed": user_uid, "rows": n})
    return n


def subscribe(conference_uid: str, event_uid: str, email: str, log: LogContext,
              now: dt.datetime | None = None) -> bool:
    """
    Subscribe an e-mail to an event, if not already subscribed.
    Returns True when the subscription already existed.
    """
    email = (email or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationFailure("invalid e-mail address")
    with get_conn() as conn:
        event = load_event(conference_uid, event_uid, conn)
        if not traits.are_event_subscriptions_available(event, now):
            raise ValidationFailure("subscriptions are closed for this event")
        exists = Subscription.factory_by_email_and_event(email, event.id, conn).query_row() is not None
        if not exists:
            Subscription.insert_row([
                DBCol(Subscription.EMAIL, email),
                DBCol(Subscription.DATE, now or dt.datetime.now(dt.timezone.utc), "t"),
                DBCol(Event.ID, event.id, "d"),
            ], conn)
    log.set_entity("EVENT", event.id)
    log.set_after({"email": email, "existed": exists})
    return exists
