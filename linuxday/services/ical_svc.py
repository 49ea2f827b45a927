from __future__ import annotations

import datetime as dt

from ..db import get_conn
from ..domain.entities import Location
from ..domain.ical import get_ical
from ..domain import traits
from .conference_svc import load_conference
from .config_svc import get_config
from .event_svc import load_event


def tropical(conference_uid: str, event_uid: str | None = None, now: dt.datetime | None = None) -> tuple[str, str]:
    """
    iCal of a whole conference, or of one of its events.

    Returns (calendar uid, ics text). The calendar uid is the conference UID,
    with '-<event uid>' appended for a single event.
    """
    cfg = get_config()
    base = cfg["site_url"]
    with get_conn() as conn:
        conference = load_conference(conference_uid, conn)
        event = load_event(conference_uid, event_uid, conn) if event_uid is not None else None

    if event:
        ident = event.id
        title = event.title
        start, end = event.start, event.end
        description = event.get(event.DESCRIPTION)
        url = traits.event_url(event, base) if traits.has_event_permalink(event) else None
    else:
        ident = conference.id
        title = conference.title
        start, end = conference.start, conference.end
        description = conference.get(conference.DESCRIPTION)
        url = traits.conference_url(conference, base)

    uid = conference.uid
    if event:
        uid += "-" + event.uid

    geo_lat = geo_lng = None
    if traits.location_has_geo(conference):
        geo_lat = conference.get(Location.LAT)
        geo_lng = conference.get(Location.LNG)

    text = get_ical(
        ident, title, start, end,
        url=url,
        description=description,
        geo_lat=geo_lat,
        geo_lng=geo_lng,
        now=now,
        prodid=cfg["ical_prodid"],
    )
    return uid, text
