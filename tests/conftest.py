import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

_TEST_DIR = tempfile.mkdtemp(prefix="voicebox-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["ADMIN_PASSWORD"] = "seed-password-123"
os.environ["ADMIN_SESSION_SECRET"] = "test-session-secret"

from voicebox_api.main import app
from voicebox_api.db import SessionLocal, get_db
from voicebox_api.db_init import drop_db, init_db
from voicebox_api.models.comment import Comment
from voicebox_api.models.moderation import ModerationStatus
from voicebox_api.models.voice import AnonymousVoice
from voicebox_api.utils.rate_limit import reset_rate_limits

SEED_PASSWORD = "seed-password-123"

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class BrokenSession:
    """
    Stand-in for a Session whose database is unreachable.
    """

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    query = get = add = commit = execute = refresh = scalar = _fail

    def rollback(self):
        pass

    def close(self):
        pass


@pytest.fixture(autouse=True)
def fresh_db(monkeypatch):
    for name in ("ADMIN_RECOVERY_PASSWORD", "APP_ENV", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    drop_db()
    init_db()
    reset_rate_limits()
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def login(client: TestClient, password: str = SEED_PASSWORD):
    return client.post("/api/admin/login", json={"password": password})


@pytest.fixture
def admin_client(client):
    resp = login(client)
    assert resp.status_code == 200
    return client


@pytest.fixture
def broken_db():
    def _broken():
        yield BrokenSession()

    app.dependency_overrides[get_db] = _broken
    yield
    app.dependency_overrides.pop(get_db, None)


def make_voice(db, message="A voice that is long enough to pass.", status=ModerationStatus.APPROVED,
               minutes=0, topic_tags=None) -> AnonymousVoice:
    voice = AnonymousVoice(
        message=message,
        topic_tags=topic_tags,
        status=status.value,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    db.add(voice)
    db.commit()
    db.refresh(voice)
    return voice


def make_comment(db, content="A comment that is long enough to pass.", status=ModerationStatus.APPROVED,
                 minutes=0) -> Comment:
    comment = Comment(
        content=content,
        status=status.value,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment
