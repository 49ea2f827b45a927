"""
Read-only derived accessors over records.

These are plain functions taking any record that carries the needed
columns, so they work on Event as well as FullEvent, on Skill as well as a
UserSkill row joined with its skill.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from .entities import Conference, Event, Location, Sharable, Skill, User, UserSkill
from .record import Record
from .request import RequestContext


def _now(now: Optional[dt.datetime]) -> dt.datetime:
    if now is None:
        return dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=dt.timezone.utc)
    return now


_UNITS = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("week", 7 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
)


def human_diff(when: dt.datetime, now: Optional[dt.datetime] = None) -> str:
    """'in 3 days', '2 hours ago', 'now'."""
    seconds = int((when - _now(now)).total_seconds())
    future = seconds > 0
    seconds = abs(seconds)
    for name, size in _UNITS:
        n = seconds // size
        if n >= 1:
            label = f"{n} {name}" + ("s" if n > 1 else "")
            return f"in {label}" if future else f"{label} ago"
    return "now"


# ===== Event =====

def event_human_start(event: Record, now: Optional[dt.datetime] = None) -> str:
    return human_diff(event.nonnull(Event.START), now)


def event_human_end(event: Record, now: Optional[dt.datetime] = None) -> str:
    return human_diff(event.nonnull(Event.END), now)


def event_start(event: Record, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    return event.nonnull(Event.START).strftime(fmt)


def event_end(event: Record, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    return event.nonnull(Event.END).strftime(fmt)


def is_event_passed(event: Record, now: Optional[dt.datetime] = None) -> bool:
    """Passed iff the end instant is strictly before now."""
    return event.nonnull(Event.END) < _now(now)


def are_event_subscriptions_available(event: Record, now: Optional[dt.datetime] = None) -> bool:
    return bool(event.get(Event.SUBSCRIPTIONS)) and not is_event_passed(event, now)


def is_event_editable(ctx: RequestContext) -> bool:
    return ctx.has_permission("edit-events")


def has_event_image(event: Record) -> bool:
    return event.get(Event.IMAGE) is not None


def event_image_url(event: Record, base_url: str) -> str:
    """Absolute image URL; relative paths are resolved against base_url."""
    img = event.nonnull(Event.IMAGE)
    if "://" in img:
        return img
    return f"{base_url.rstrip('/')}/{img.lstrip('/')}"


def has_event_description(event: Record) -> bool:
    return event.get(Event.DESCRIPTION) is not None


def has_event_abstract(event: Record) -> bool:
    return event.get(Event.ABSTRACT) is not None


def has_event_note(event: Record) -> bool:
    return event.get(Event.NOTE) is not None


def has_event_permalink(event: Record) -> bool:
    return bool(event.get(Event.UID)) and event.has(Conference.UID) and bool(event.get(Conference.UID))


def event_url(event: Record, base_url: str) -> str:
    """Public page of an event; needs a FullEvent (conference UID joined in)."""
    return f"{base_url.rstrip('/')}/{event.nonnull(Conference.UID)}/event/{event.nonnull(Event.UID)}"


def users_of_event(event: Record, conn=None):
    return User.factory_by_event(event.nonnull(Event.ID), conn)


def sharables_of_event(event: Record, conn=None):
    return Sharable.factory_by_event(event.nonnull(Event.ID), conn)


# ===== Conference =====

def conference_url(conference: Record, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/{conference.nonnull(Conference.UID)}"


def location_has_geo(conference: Record) -> bool:
    if not conference.has(Location.LAT):
        return False
    return conference.get(Location.LAT) is not None and conference.get(Location.LNG) is not None


# ===== User =====

def user_fullname(user: Record) -> str:
    return f"{user.get(User.NAME)} {user.get(User.SURNAME)}".strip()


def has_permission_to_edit_user(user: Record, ctx: RequestContext) -> bool:
    """Users may edit themselves; anybody else needs edit-users."""
    if ctx.user_uid is not None and ctx.user_uid == user.get(User.UID):
        return True
    return ctx.has_permission("edit-users")


def skills_of_user(user: Record, conn=None):
    return UserSkill.factory_by_user(user.nonnull(User.ID), conn)


# ===== Skill =====

def skill_phrase(skill: Record) -> str:
    phrase = skill.get(Skill.PHRASE)
    if phrase:
        return phrase
    return f"Knows {skill.nonnull(Skill.UID)}"
