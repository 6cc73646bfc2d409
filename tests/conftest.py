import os
import tempfile
import uuid

# Point the app at a throwaway SQLite file before anything imports database.py
_db_dir = tempfile.mkdtemp(prefix="askpulse-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["DATABASE_SSL"] = "false"

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="session")
def client():
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def participant_id():
    return str(uuid.uuid4())


@pytest.fixture
def host_session(client):
    """A freshly created session; includes the organizer token."""
    r = client.post("/api/sessions/", json={"title": "Weekly all-hands", "description": "Ask anything"})
    assert r.status_code == 201, r.text
    return r.json()


def submit_question(client, session, participant_id, content="How do we ship faster?", **extra):
    return client.post(
        f"/api/sessions/{session['code']}/questions/",
        json={"content": content, "participant_id": participant_id, **extra},
    )


def set_status(client, session, question_id, status):
    return client.patch(
        f"/api/organizer/{session['code']}/{session['organizer_token']}/questions/{question_id}",
        json={"status": status},
    )


@pytest.fixture
def approved_question(client, host_session, participant_id):
    r = submit_question(client, host_session, participant_id)
    assert r.status_code == 201, r.text
    question = r.json()["question"]
    assert set_status(client, host_session, question["id"], "approved").status_code == 200
    return question


def expire_session(code):
    """Push a session's expiry into the past directly in the database."""
    import asyncio
    from datetime import timedelta

    from sqlalchemy import update
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import NullPool

    from models import QASession
    from utils import get_utc_now

    async def run():
        engine = create_async_engine(os.environ["DATABASE_URL"], poolclass=NullPool)
        try:
            async with engine.begin() as conn:
                await conn.execute(
                    update(QASession)
                    .where(QASession.code == code)
                    .values(expires_at=get_utc_now() - timedelta(minutes=1))
                )
        finally:
            await engine.dispose()

    asyncio.run(run())
