"""
trop-iCal: a minimal RFC 5545 VCALENDAR with a single VEVENT.
"""
from __future__ import annotations

import datetime as dt
import html
import re
from typing import Optional

from .attributes import to_datetime

DEFAULT_PRODID = "-//ldto/asd//NONSGML v1.0//EN"
ICAL_DATETIME_FORMAT = "%Y%m%dT%H%M%SZ"

_TAG_RE = re.compile(r"<[^>]*>")


def ical_datetime(value) -> str:
    return to_datetime(value).strftime(ICAL_DATETIME_FORMAT)


def _one_line(text) -> str:
    return str(text).replace("\r\n", " ").replace("\n", " ").replace("\r", " ")


def _clean_description(description: str) -> str:
    return html.escape(_TAG_RE.sub("", _one_line(description)))


def get_ical(
    uid,
    title: str,
    start,
    end,
    url: Optional[str] = None,
    description: Optional[str] = None,
    geo_lat: Optional[float] = None,
    geo_lng: Optional[float] = None,
    now: Optional[dt.datetime] = None,
    prodid: str = DEFAULT_PRODID,
) -> str:
    """
    start/end accept anything to_datetime understands (datetime, ISO text,
    UNIX timestamp). Optional lines are left out when their value is empty.
    """
    stamp = now or dt.datetime.now(dt.timezone.utc)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{_one_line(prodid)}",
        "CALSCALE:GREGORIAN",
        "BEGIN:VEVENT",
        f"UID:{_one_line(uid)}",
        f"SUMMARY:{html.escape(_one_line(title or ''))}",
    ]
    if description:
        lines.append(f"DESCRIPTION:{_clean_description(description)}")
    if url:
        lines.append(f"URL;VALUE=URI:{html.escape(_one_line(url))}")
    if geo_lat is not None and geo_lng is not None:
        lines.append(f"GEO:{geo_lat};{geo_lng}")
    lines += [
        f"DTSTART:{ical_datetime(start)}",
        f"DTEND:{ical_datetime(end)}",
        f"DTSTAMP:{ical_datetime(stamp)}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"
