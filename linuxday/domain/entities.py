"""
Concrete records of the Linux Day site.

Column constants name the schema columns; typed properties read the
normalized values. Derived behaviour (human dates, permissions, related
lookups) lives in traits.py.
"""
from __future__ import annotations

import datetime as dt
from sqlite3 import Connection
from typing import Optional

from .record import Record


class User(Record):
    TABLE = "user"
    ID = "user_ID"
    UID = "user_uid"
    NAME = "user_name"
    SURNAME = "user_surname"
    EMAIL = "user_email"
    ROLE = "user_role"
    PUBLIC = "user_public"
    BIO = "user_bio"

    COLUMNS = (ID, UID, NAME, SURNAME, EMAIL, ROLE, PUBLIC, BIO)
    REQUIRED = (UID, NAME, SURNAME)
    INTEGERS = (ID,)
    BOOLEANS = (PUBLIC,)

    @property
    def name(self) -> str:
        return self.get(self.NAME)

    @property
    def surname(self) -> str:
        return self.get(self.SURNAME)

    @property
    def role(self) -> str:
        return self.get(self.ROLE) or "user"

    @classmethod
    def factory_by_event(cls, event_id: int, conn: Optional[Connection] = None):
        return (
            cls.factory(conn)
            .join(EventUser, "event_user.user_ID = user.user_ID")
            .where_column("event_user.event_ID", int(event_id))
            .order_by("event_user_order")
        )


class Skill(Record):
    TABLE = "skill"
    ID = "skill_ID"
    UID = "skill_uid"
    PHRASE = "skill_phrase"
    TYPE = "skill_type"

    COLUMNS = (ID, UID, PHRASE, TYPE)
    REQUIRED = (UID,)
    INTEGERS = (ID,)


class UserSkill(Record):
    """Join row between User and Skill, carrying the score."""
    TABLE = "user_skill"
    SCORE = "skill_score"

    COLUMNS = (User.ID, Skill.ID, SCORE)
    REQUIRED = (User.ID, Skill.ID)
    INTEGERS = (User.ID, Skill.ID, SCORE)

    @property
    def score(self) -> int:
        return self.get(self.SCORE)

    @classmethod
    def factory_by_user(cls, user_id: int, conn: Optional[Connection] = None):
        return (
            cls.factory(conn)
            .join(Skill, "skill.skill_ID = user_skill.skill_ID")
            .where_column("user_skill.user_ID", int(user_id))
            .order_by("skill_uid")
        )

    @classmethod
    def factory_by_pair(cls, user_id: int, skill_id: int, conn: Optional[Connection] = None):
        return (
            cls.factory(conn)
            .where_column(User.ID, int(user_id))
            .where_column(Skill.ID, int(skill_id))
        )


class Location(Record):
    TABLE = "location"
    ID = "location_ID"
    UID = "location_uid"
    NAME = "location_name"
    ADDRESS = "location_address"
    GEOTHING = "location_geothing"
    LAT = "location_lat"
    LNG = "location_lng"

    COLUMNS = (ID, UID, NAME, ADDRESS, GEOTHING, LAT, LNG)
    REQUIRED = (UID, NAME)
    INTEGERS = (ID,)


class Conference(Record):
    TABLE = "conference"
    ID = "conference_ID"
    UID = "conference_uid"
    TITLE = "conference_title"
    SUBTITLE = "conference_subtitle"
    DESCRIPTION = "conference_description"
    START = "conference_start"
    END = "conference_end"

    COLUMNS = (ID, UID, TITLE, SUBTITLE, DESCRIPTION, START, END, Location.ID)
    REQUIRED = (UID, TITLE, START, END)
    INTEGERS = (ID, Location.ID)
    DATETIMES = (START, END)

    @property
    def title(self) -> str:
        return self.get(self.TITLE)

    @property
    def start(self) -> dt.datetime:
        return self.get(self.START)

    @property
    def end(self) -> dt.datetime:
        return self.get(self.END)


class FullConference(Conference):
    """Conference joined with its (optional) location."""

    @classmethod
    def factory(cls, conn: Optional[Connection] = None):
        from .query import Query
        return Query(cls, conn).join(Location, "location.location_ID = conference.location_ID", left=True)


class Event(Record):
    TABLE = "event"
    ID = "event_ID"
    UID = "event_uid"
    TITLE = "event_title"
    SUBTITLE = "event_subtitle"
    IMAGE = "event_img"
    START = "event_start"
    END = "event_end"
    DESCRIPTION = "event_description"
    ABSTRACT = "event_abstract"
    NOTE = "event_note"
    LANGUAGE = "event_language"
    SUBSCRIPTIONS = "event_subscriptions"

    COLUMNS = (
        ID, UID, TITLE, SUBTITLE, IMAGE, START, END,
        DESCRIPTION, ABSTRACT, NOTE, LANGUAGE, SUBSCRIPTIONS, Conference.ID,
    )
    REQUIRED = (UID, TITLE, START, END, Conference.ID)
    INTEGERS = (ID, Conference.ID)
    DATETIMES = (START, END)
    BOOLEANS = (SUBSCRIPTIONS,)

    @property
    def title(self) -> str:
        return self.get(self.TITLE)

    @property
    def start(self) -> dt.datetime:
        return self.get(self.START)

    @property
    def end(self) -> dt.datetime:
        return self.get(self.END)

    @property
    def conference_id(self) -> int:
        return self.nonnull(Conference.ID)

    @classmethod
    def factory_by_conference(cls, conference_id: int, conn: Optional[Connection] = None):
        return cls.factory(conn).where_column("event.conference_ID", int(conference_id)).order_by("event_start")

    @classmethod
    def factory_from_conference_and_event_uid(cls, conference: Conference, uid: str, conn: Optional[Connection] = None):
        return cls.factory_by_conference(conference.id, conn).where_column(cls.UID, uid)


class FullEvent(Event):
    """Event joined with its conference."""

    @classmethod
    def factory(cls, conn: Optional[Connection] = None):
        from .query import Query
        return Query(cls, conn).join(Conference, "conference.conference_ID = event.conference_ID")


class EventUser(Record):
    """Speaker assignment: which users hold an event, in which order."""
    TABLE = "event_user"
    ORDER = "event_user_order"

    COLUMNS = (Event.ID, User.ID, ORDER)
    REQUIRED = (Event.ID, User.ID)
    INTEGERS = (Event.ID, User.ID, ORDER)


class Sharable(Record):
    """A file or link attached to an event (slides, recordings...)."""
    TABLE = "sharable"
    ID = "sharable_ID"
    TITLE = "sharable_title"
    TYPE = "sharable_type"
    PATH = "sharable_path"
    MIMETYPE = "sharable_mimetype"
    LICENSE = "sharable_license"

    COLUMNS = (ID, TITLE, TYPE, PATH, MIMETYPE, LICENSE, Event.ID)
    REQUIRED = (TYPE, PATH, LICENSE, Event.ID)
    INTEGERS = (ID, Event.ID)

    @classmethod
    def factory_by_event(cls, event_id: int, conn: Optional[Connection] = None):
        return cls.factory(conn).where_column(Event.ID, int(event_id)).order_by(cls.ID)


class Subscription(Record):
    TABLE = "subscription"
    ID = "subscription_ID"
    EMAIL = "subscription_email"
    DATE = "subscription_date"
    CONFIRMED = "subscription_confirmed"

    COLUMNS = (ID, EMAIL, DATE, CONFIRMED, Event.ID)
    REQUIRED = (EMAIL, DATE, Event.ID)
    INTEGERS = (ID, Event.ID)
    DATETIMES = (DATE,)
    BOOLEANS = (CONFIRMED,)

    @classmethod
    def factory_by_email_and_event(cls, email: str, event_id: int, conn: Optional[Connection] = None):
        return cls.factory(conn).where_column(cls.EMAIL, email).where_column(Event.ID, int(event_id))
