import datetime as dt

import pytest

from linuxday.db import get_conn
from linuxday.domain.errors import NotFound, PermissionDenied, ValidationFailure
from linuxday.domain.request import RequestContext
from linuxday.logs import LogContext
from linuxday.services.conference_svc import save_conference, save_location
from linuxday.services.event_svc import (
    add_event_speaker, get_event_detail, remove_event_speaker, save_event, subscribe,
)

UTC = dt.timezone.utc
ADMIN = RequestContext.for_role("admin", "admin")
BEFORE_2016 = dt.datetime(2016, 10, 1, tzinfo=UTC)


def _count(sql, *args):
    with get_conn() as conn:
        return conn.execute(sql, args).fetchone()[0]


def test_repeated_speaker_keeps_one_row(site):
    assert add_event_speaker(ADMIN, "2016", "kernel", "admin", 1, LogContext("T")) == ["mario", "admin"]
    speakers = add_event_speaker(ADMIN, "2016", "kernel", "mario", 5, LogContext("T"))

    assert speakers == ["admin", "mario"]
    assert _count("SELECT COUNT(1) FROM event_user WHERE event_ID=1 AND user_ID=2") == 1
    assert _count("SELECT event_user_order FROM event_user WHERE event_ID=1 AND user_ID=2") == 5


def test_speaker_needs_known_user_and_permission(site):
    with pytest.raises(NotFound):
        add_event_speaker(ADMIN, "2016", "kernel", "nobody", 0, LogContext("T"))
    with pytest.raises(PermissionDenied):
        add_event_speaker(RequestContext.for_role("mario", "user"), "2016", "kernel", "mario", 0, LogContext("T"))


def test_remove_speaker(site):
    assert remove_event_speaker(ADMIN, "2016", "kernel", "mario", LogContext("T")) == 1
    assert remove_event_speaker(ADMIN, "2016", "kernel", "mario", LogContext("T")) == 0
    assert get_event_detail(ADMIN, "2016", "kernel")["speakers"] == []


def test_subscribe_twice(site):
    assert subscribe("2016", "kernel", " Ada@Example.org ", LogContext("T"), now=BEFORE_2016) is False
    assert subscribe("2016", "kernel", "ada@example.org", LogContext("T"), now=BEFORE_2016) is True
    assert _count("SELECT COUNT(1) FROM subscription WHERE event_ID=1") == 1
    assert _count("SELECT COUNT(1) FROM subscription WHERE subscription_email='ada@example.org'") == 1


def test_subscribe_rejects_bad_email(site):
    with pytest.raises(ValidationFailure):
        subscribe("2016", "kernel", "not-an-email", LogContext("T"), now=BEFORE_2016)


def test_event_partial_update_checks_stored_bounds(site):
    # stored: 10:00 - 11:00
    with pytest.raises(ValidationFailure):
        save_event(ADMIN, "2016", "kernel", {"start": dt.datetime(2016, 10, 22, 12, 0, tzinfo=UTC)}, LogContext("T"))
    with pytest.raises(ValidationFailure):
        save_event(ADMIN, "2016", "kernel", {"end": dt.datetime(2016, 10, 22, 9, 0, tzinfo=UTC)}, LogContext("T"))

    saved = save_event(ADMIN, "2016", "kernel", {"start": dt.datetime(2016, 10, 22, 10, 30, tzinfo=UTC)}, LogContext("T"))
    assert saved["event_start"] == "2016-10-22T10:30:00+00:00"
    assert saved["event_end"] == "2016-10-22T11:00:00+00:00"


def test_event_image_url(site):
    saved = save_event(ADMIN, "2016", "kernel", {"img": "/images/kernel.png"}, LogContext("T"))
    assert saved["image_url"] == "https://linuxdaytorino.org/images/kernel.png"
    saved = save_event(ADMIN, "2016", "kernel", {"img": "https://cdn.example.org/k.png"}, LogContext("T"))
    assert saved["image_url"] == "https://cdn.example.org/k.png"


def test_conference_create_and_partial_update(site):
    fields = {
        "uid": "2017",
        "title": "Linux Day 2017",
        "start": dt.datetime(2017, 10, 28, 9, 0, tzinfo=UTC),
        "end": dt.datetime(2017, 10, 28, 18, 0, tzinfo=UTC),
        "location_uid": "dip-info",
    }
    created = save_conference(ADMIN, None, fields, LogContext("T"))
    assert created["conference_uid"] == "2017"
    assert created["url"] == "https://linuxdaytorino.org/2017"
    assert created["has_geo"] is True

    updated = save_conference(ADMIN, "2017", {"subtitle": "Torino"}, LogContext("T"))
    assert updated["conference_ID"] == created["conference_ID"]
    assert updated["conference_subtitle"] == "Torino"
    assert updated["conference_title"] == "Linux Day 2017"
    assert updated["conference_start"] == "2017-10-28T09:00:00+00:00"


def test_conference_uid_taken_on_update(site):
    save_conference(ADMIN, None, {
        "uid": "2017", "title": "Linux Day 2017",
        "start": "2017-10-28 09:00:00", "end": "2017-10-28 18:00:00",
    }, LogContext("T"))
    with pytest.raises(ValidationFailure):
        save_conference(ADMIN, "2017", {"uid": "2016"}, LogContext("T"))
    with pytest.raises(ValidationFailure):
        save_conference(ADMIN, None, {
            "uid": "2016", "title": "again", "start": "2016-10-22 09:00:00", "end": "2016-10-22 18:00:00",
        }, LogContext("T"))
    # renaming to its own UID is allowed
    assert save_conference(ADMIN, "2017", {"uid": "2017"}, LogContext("T"))["conference_uid"] == "2017"


def test_conference_end_before_start(site):
    with pytest.raises(ValidationFailure):
        save_conference(ADMIN, "2016", {"end": "2016-10-22 08:00:00"}, LogContext("T"))
    with pytest.raises(ValidationFailure):
        save_conference(ADMIN, None, {
            "uid": "2018", "title": "x", "start": "2018-10-27 18:00:00", "end": "2018-10-27 09:00:00",
        }, LogContext("T"))


def test_conference_unknown_location(site):
    with pytest.raises(NotFound):
        save_conference(ADMIN, "2016", {"location_uid": "nowhere"}, LogContext("T"))


def test_save_location_create_then_update(site):
    created = save_location(ADMIN, "lab", "Lab", None, None, None, LogContext("T"))
    assert created["location_name"] == "Lab"
    assert created["location_lat"] is None

    updated = save_location(ADMIN, "lab", "Lab 2", "Via Pessinetto 12", 45.09, 7.66, LogContext("T"))
    assert updated["location_ID"] == created["location_ID"]
    assert updated["location_name"] == "Lab 2"
    assert updated["location_lat"] == 45.09
    assert _count("SELECT COUNT(1) FROM location WHERE location_uid='lab'") == 1

    with pytest.raises(PermissionDenied):
        save_location(RequestContext.for_role("mario", "user"), "lab", "x", None, None, None, LogContext("T"))
