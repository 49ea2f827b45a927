import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "ldto_test.db"
    # Point linuxday to this temp DB
    os.environ["LDTO_DB_PATH"] = str(path)
    schema = Path(_PROJECT_ROOT / "schema.sql").read_text(encoding="utf-8")
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(schema)
        conn.commit()
    finally:
        conn.close()
    from linuxday.logs import ensure_log_schema
    ensure_log_schema()
    return str(path)


@pytest.fixture()
def client(tmp_db_path):
    from linuxday.services.config_svc import ensure_default_config
    ensure_default_config()
    # Import app after DB ready so startup hooks can use it
    from linuxday.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("LDTO_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    tables = [
        "subscription",
        "sharable",
        "event_user",
        "event",
        "conference",
        "location",
        "user_skill",
        "skill",
        "user",
        "config",
        "operation_log",
    ]
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in tables:
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture()
def site(tmp_db_path):
    """
    A small site: one location with coordinates, the 2016 conference there,
    one talk with a speaker, an admin and a plain user, two skills.
    """
    from linuxday.db import get_conn
    with get_conn() as conn:
        conn.execute(
            "INSERT INTO location(location_ID, location_uid, location_name, location_lat, location_lng) "
            "VALUES(1, 'dip-info', 'Dipartimento di Informatica', 45.07, 7.68)"
        )
        conn.execute(
            "INSERT INTO conference(conference_ID, conference_uid, conference_title, conference_description, "
            "conference_start, conference_end, location_ID) "
            "VALUES(1, '2016', 'Linux Day 2016', 'The <b>Linux Day</b>\nin Torino', "
            "'2016-10-22 09:00:00', '2016-10-22 18:00:00', 1)"
        )
        conn.execute(
            "INSERT INTO event(event_ID, event_uid, event_title, event_start, event_end, event_description, "
            "event_subscriptions, conference_ID) "
            "VALUES(1, 'kernel', 'The Linux kernel', '2016-10-22 10:00:00', '2016-10-22 11:00:00', "
            "'About the kernel', 1, 1)"
        )
        conn.execute(
            "INSERT INTO user(user_ID, user_uid, user_name, user_surname, user_role) "
            "VALUES(1, 'admin', 'Ada', 'Admin', 'admin')"
        )
        conn.execute(
            "INSERT INTO user(user_ID, user_uid, user_name, user_surname, user_role) "
            "VALUES(2, 'mario', 'Mario', 'Rossi', 'user')"
        )
        conn.execute("INSERT INTO event_user(event_ID, user_ID, event_user_order) VALUES(1, 2, 0)")
        conn.execute("INSERT INTO skill(skill_ID, skill_uid, skill_phrase) VALUES(1, 'linux', 'Uses GNU/Linux')")
        conn.execute("INSERT INTO skill(skill_ID, skill_uid) VALUES(2, 'python')")
    return {"conference": "2016", "event": "kernel", "admin": "admin", "user": "mario"}
