import re

import config
from conftest import submit_question


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "ok"
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"]["success"] is True


def test_create_session(client):
    r = client.post("/api/sessions/", json={"title": "  Town hall  ", "description": "Q1 plans"})
    assert r.status_code == 201
    body = r.json()
    assert re.match(r"^[A-Z0-9]{6}$", body["code"])
    assert body["title"] == "Town hall"
    assert body["is_active"] and body["is_accepting_questions"]
    assert body["organizer_token"]
    assert body["qr_code"]
    assert body["join_url"].endswith(f"/session/{body['code']}")
    assert body["expires_at"].endswith("Z")


def test_create_and_get_agree_on_timestamps(client, host_session):
    fetched = client.get(f"/api/sessions/{host_session['code']}").json()
    for field in ("created_at", "updated_at", "expires_at"):
        assert host_session[field].endswith("Z")
        assert host_session[field] == fetched[field]


def test_create_session_reports_all_field_errors(client):
    r = client.post("/api/sessions/", json={"title": "AB", "description": "x" * 501})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert {e["field"] for e in body["errors"]} == {"title", "description"}


def test_create_session_requires_title(client):
    r = client.post("/api/sessions/", json={})
    assert r.status_code == 400
    assert r.json()["errors"] == [{"field": "title", "message": "Title is required"}]


def test_get_session_hides_token(client, host_session):
    r = client.get(f"/api/sessions/{host_session['code']}")
    assert r.status_code == 200
    assert r.json()["code"] == host_session["code"]
    assert "organizer_token" not in r.json()


def test_get_session_lowercase_code(client, host_session):
    assert client.get(f"/api/sessions/{host_session['code'].lower()}").status_code == 200


def test_get_session_errors(client):
    assert client.get("/api/sessions/AB-1").status_code == 400
    assert client.get("/api/sessions/ZZZZZ0").status_code == 404


def test_expired_session_is_gone(client, monkeypatch):
    monkeypatch.setattr(config, "SESSION_DURATION_HOURS", -1)
    created = client.post("/api/sessions/", json={"title": "Already over"}).json()

    assert client.get(f"/api/sessions/{created['code']}").status_code == 410
    assert client.get(f"/api/sessions/{created['code']}/questions/").status_code == 410


def test_host_toggles_session(client, host_session, participant_id):
    url = f"/api/sessions/{host_session['code']}/{host_session['organizer_token']}"

    r = client.patch(url, json={"is_accepting_questions": False})
    assert r.status_code == 200
    assert r.json()["is_accepting_questions"] is False
    assert r.json()["is_active"] is True

    r = submit_question(client, host_session, participant_id)
    assert r.status_code == 403

    assert client.patch(url, json={}).status_code == 400


def test_inactive_session_rejects_questions(client, host_session, participant_id):
    url = f"/api/sessions/{host_session['code']}/{host_session['organizer_token']}"
    client.patch(url, json={"is_active": False})
    assert submit_question(client, host_session, participant_id).status_code == 403


def test_wrong_token_is_forbidden(client, host_session):
    url = f"/api/sessions/{host_session['code']}/not-the-right-token"
    assert client.patch(url, json={"is_active": False}).status_code == 403
    assert client.delete(url).status_code == 403


def test_host_deletes_session(client, host_session, participant_id):
    assert submit_question(client, host_session, participant_id).status_code == 201

    r = client.delete(f"/api/sessions/{host_session['code']}/{host_session['organizer_token']}")
    assert r.status_code == 204
    assert client.get(f"/api/sessions/{host_session['code']}").status_code == 404
