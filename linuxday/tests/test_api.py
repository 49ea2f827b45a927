from linuxday.db import get_conn

ADMIN = {"X-LDTO-User": "admin"}


def test_health_and_version(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/version").json().get("app") == "linuxday-api"


def test_tropical_errors(client, site):
    r = client.get("/api/tropical")
    assert r.status_code == 404
    assert r.json()["detail"] == "Missing 'conference' argument"

    r = client.get("/api/tropical", params={"conference": "1999"})
    assert r.status_code == 404
    assert r.json()["detail"] == "Conference not found"

    r = client.get("/api/tropical", params={"conference": "2016", "event": "nope"})
    assert r.status_code == 404
    assert r.json()["detail"] == "Event not found"


def test_tropical_conference(client, site):
    r = client.get("/api/tropical", params={"conference": "2016"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/calendar")
    assert r.headers["content-disposition"] == "attachment; filename=2016.ics"
    lines = r.text.split("\r\n")
    assert "SUMMARY:Linux Day 2016" in lines
    assert "DTSTART:20161022T090000Z" in lines
    assert "DTEND:20161022T180000Z" in lines
    assert "GEO:45.07;7.68" in lines
    assert "URL;VALUE=URI:https://linuxdaytorino.org/2016" in lines
    assert "DESCRIPTION:The Linux Day in Torino" in lines


def test_tropical_event_debug(client, site):
    r = client.get("/api/tropical", params={"conference": "2016", "event": "kernel", "debug": "1"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert "content-disposition" not in r.headers
    lines = r.text.split("\r\n")
    assert "SUMMARY:The Linux kernel" in lines
    assert "DTSTART:20161022T100000Z" in lines
    assert "URL;VALUE=URI:https://linuxdaytorino.org/2016/event/kernel" in lines


def test_user_save_permissions(client, site):
    body = {"name": "Grace", "surname": "Hopper", "uid": "grace"}
    r = client.post("/api/user/save", json=body)
    assert r.status_code == 403

    r = client.post("/api/user/save", json=body, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["user"]["user_uid"] == "grace"

    r = client.post("/api/user/save", json={"current_uid": "nobody", **body}, headers=ADMIN)
    assert r.status_code == 404

    # operation log keeps both outcomes
    with get_conn() as conn:
        results = [row["result"] for row in conn.execute(
            "SELECT result FROM operation_log WHERE action='SAVE_USER' ORDER BY id")]
    assert results == ["ERROR", "OK", "ERROR"]


def test_user_skill_routes(client, site):
    mario = {"X-LDTO-User": "mario"}
    r = client.post("/api/user/skill/add", json={"user_uid": "mario", "skill_uid": "linux", "skill_score": 3}, headers=mario)
    assert r.status_code == 200
    r = client.post("/api/user/skill/add", json={"user_uid": "mario", "skill_uid": "linux", "skill_score": 4}, headers=mario)
    assert [(s["skill_uid"], s["skill_score"]) for s in r.json()["skills"]] == [("linux", 4)]

    r = client.post("/api/user/skill/add", json={"user_uid": "mario", "skill_uid": "cobol"}, headers=mario)
    assert r.status_code == 404

    detail = client.get("/api/user/mario").json()
    assert detail["fullname"] == "Mario Rossi"
    assert [s["skill_uid"] for s in detail["skills"]] == ["linux"]
    assert client.get("/api/user/nobody").status_code == 404


def test_skill_list_is_ordered(client, site):
    r = client.post("/api/skill/create", json={"uid": "bash"}, headers=ADMIN)
    assert r.status_code == 201
    items = client.get("/api/skill/list").json()["items"]
    assert [s["skill_uid"] for s in items] == ["bash", "linux", "python"]
    assert client.post("/api/skill/create", json={"uid": "zsh"}).status_code == 403


def test_event_detail_and_save(client, site):
    r = client.get("/api/event/2016/kernel")
    assert r.status_code == 200
    data = r.json()
    assert data["is_passed"] is True
    assert data["editable"] is False
    assert [s["user_uid"] for s in data["speakers"]] == ["mario"]

    body = {
        "conference_uid": "2016",
        "uid": "gnu",
        "title": "GNU",
        "start": "2016-10-22T14:00:00Z",
        "end": "2016-10-22T15:00:00Z",
    }
    assert client.post("/api/event/save", json=body).status_code == 403
    r = client.post("/api/event/save", json=body, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["event"]["event_start"] == "2016-10-22T14:00:00+00:00"

    # partial update: only the subtitle changes
    r = client.post("/api/event/save", json={"conference_uid": "2016", "current_uid": "gnu", "subtitle": "GNU's Not Unix"}, headers=ADMIN)
    assert r.status_code == 200
    event = r.json()["event"]
    assert event["event_subtitle"] == "GNU's Not Unix"
    assert event["event_title"] == "GNU"

    bad = {**body, "uid": "bad", "end": "2016-10-22T13:00:00Z"}
    assert client.post("/api/event/save", json=bad, headers=ADMIN).status_code == 400

    items = client.get("/api/conference/2016/events").json()["items"]
    assert [e["event_uid"] for e in items] == ["kernel", "gnu"]


def test_subscribe_closed_for_passed_event(client, site):
    r = client.post("/api/event/subscribe", json={"conference_uid": "2016", "event_uid": "kernel", "email": "a@example.org"})
    assert r.status_code == 400


def test_settings(client, site):
    assert client.get("/api/settings/get").json()["site_url"] == "https://linuxdaytorino.org"
    r = client.post("/api/settings/update", json={"updates": {"site_url": "https://example.org"}})
    assert r.status_code == 403
    r = client.post("/api/settings/update", json={"updates": {"site_url": "https://example.org"}}, headers=ADMIN)
    assert r.status_code == 200
    r = client.get("/api/tropical", params={"conference": "2016"})
    assert "URL;VALUE=URI:https://example.org/2016" in r.text.split("\r\n")
    r = client.post("/api/settings/update", json={"updates": {"nope": 1}}, headers=ADMIN)
    assert r.status_code == 400


def test_tropical_debug_zero_is_a_download(client, site):
    r = client.get("/api/tropical", params={"conference": "2016", "debug": "0"})
    assert r.headers["content-type"].startswith("text/calendar")
    assert r.headers["content-disposition"] == "attachment; filename=2016.ics"


def test_conference_uid_collision_is_bad_request(client, site):
    body = {"uid": "2017", "title": "Linux Day 2017",
            "start": "2017-10-28T09:00:00Z", "end": "2017-10-28T18:00:00Z"}
    assert client.post("/api/conference/save", json=body, headers=ADMIN).status_code == 200

    r = client.post("/api/conference/save", json={"current_uid": "2017", "uid": "2016"}, headers=ADMIN)
    assert r.status_code == 400
    assert client.get("/api/conference/2017").status_code == 200
    uids = [c["conference_uid"] for c in client.get("/api/conference/list").json()["items"]]
    assert uids == ["2017", "2016"]


def test_speaker_routes(client, site):
    speaker = {"conference_uid": "2016", "event_uid": "kernel", "user_uid": "mario", "order": 2}
    assert client.post("/api/event/speaker/add", json=speaker).status_code == 403
    r = client.post("/api/event/speaker/add", json=speaker, headers=ADMIN)
    assert r.json()["speakers"] == ["mario"]
    r = client.post("/api/event/speaker/remove", json=speaker, headers=ADMIN)
    assert r.json()["removed"] == 1
    assert client.get("/api/event/2016/kernel").json()["speakers"] == []


def test_logs_search(client, site):
    client.post("/api/skill/create", json={"uid": "bash"})
    client.post("/api/skill/create", json={"uid": "bash"}, headers=ADMIN)
    client.post("/api/settings/update", json={"updates": {"site_name": "Torino Linux Club"}}, headers=ADMIN)

    assert client.get("/api/logs/search").status_code == 403
    assert client.get("/api/logs/search", headers={"X-LDTO-User": "mario"}).status_code == 403

    data = client.get("/api/logs/search", params={"action": "CREATE_SKILL"}, headers=ADMIN).json()
    assert data["total"] == 2
    assert sorted((i["user"], i["result"]) for i in data["items"]) == [("admin", "OK"), ("anonymous", "ERROR")]

    data = client.get("/api/logs/search", params={"user": "admin"}, headers=ADMIN).json()
    assert data["total"] == 2
    assert {i["action"] for i in data["items"]} == {"CREATE_SKILL", "SETTINGS_UPDATE"}

    data = client.get("/api/logs/search", params={"query": "Torino Linux Club", "size": 1}, headers=ADMIN).json()
    assert data["total"] == 1
    assert data["items"][0]["action"] == "SETTINGS_UPDATE"
