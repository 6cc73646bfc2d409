import uuid

from conftest import set_status, submit_question


def list_questions(client, session):
    r = client.get(f"/api/sessions/{session['code']}/questions/")
    assert r.status_code == 200
    return r.json()


def test_submit_question(client, host_session, participant_id):
    r = submit_question(client, host_session, participant_id, content="  Is lunch provided?  ", author_name=" Ana ")
    assert r.status_code == 201
    question = r.json()["question"]
    assert question["content"] == "Is lunch provided?"
    assert question["author_name"] == "Ana"
    assert question["status"] == "pending"
    assert question["vote_count"] == 0
    assert "pulse_check_stats" not in question
    assert r.headers["X-RateLimit-Limit"] == "5"
    assert r.headers["X-RateLimit-Remaining"] == "4"


def test_submit_question_validation(client, host_session):
    r = submit_question(client, host_session, "nope", content="")
    assert r.status_code == 400
    assert {e["field"] for e in r.json()["errors"]} == {"content", "participant_id"}


def test_submit_question_unknown_session(client, participant_id):
    r = client.post("/api/sessions/QQQQQ9/questions/", json={"content": "Hello?", "participant_id": participant_id})
    assert r.status_code == 404


def test_question_submission_is_rate_limited(client, host_session, participant_id):
    for i in range(5):
        assert submit_question(client, host_session, participant_id, content=f"Question {i}").status_code == 201

    r = submit_question(client, host_session, participant_id, content="One too many")
    assert r.status_code == 429
    assert r.json()["code"] == "RATE_LIMIT_EXCEEDED"
    assert r.json()["retry_after"] > 0
    assert int(r.headers["Retry-After"]) > 0

    # Another participant still gets through
    assert submit_question(client, host_session, str(uuid.uuid4())).status_code == 201


def test_participants_only_see_moderated_questions(client, host_session):
    created = {}
    for status in ("pending", "approved", "dismissed", "being_answered", "answered"):
        r = submit_question(client, host_session, str(uuid.uuid4()), content=f"{status} question")
        created[status] = r.json()["question"]["id"]
        if status != "pending":
            assert set_status(client, host_session, created[status], status).status_code == 200

    body = list_questions(client, host_session)
    listed = [q["id"] for q in body["questions"]]

    assert body["total"] == 3
    assert listed == [created["being_answered"], created["approved"], created["answered"]]


def test_pulse_stats_present_only_when_answered(client, host_session):
    answered = submit_question(client, host_session, str(uuid.uuid4()), content="Answered one").json()["question"]
    approved = submit_question(client, host_session, str(uuid.uuid4()), content="Open one").json()["question"]
    set_status(client, host_session, answered["id"], "answered")
    set_status(client, host_session, approved["id"], "approved")

    by_id = {q["id"]: q for q in list_questions(client, host_session)["questions"]}

    assert by_id[answered["id"]]["pulse_check_stats"] == {"helpful": 0, "neutral": 0, "not_helpful": 0}
    assert "pulse_check_stats" not in by_id[approved["id"]]


def test_votes_order_participant_list(client, host_session):
    first = submit_question(client, host_session, str(uuid.uuid4()), content="First asked").json()["question"]
    second = submit_question(client, host_session, str(uuid.uuid4()), content="Second asked").json()["question"]
    for q in (first, second):
        set_status(client, host_session, q["id"], "approved")

    # Same votes: older first
    assert [q["id"] for q in list_questions(client, host_session)["questions"]] == [first["id"], second["id"]]

    client.post(f"/api/questions/{second['id']}/vote", json={"participant_id": str(uuid.uuid4())})
    assert [q["id"] for q in list_questions(client, host_session)["questions"]] == [second["id"], first["id"]]
