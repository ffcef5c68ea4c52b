"""Pytest fixtures: per-test SQLite database, recording notifier and API helpers."""
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from strands.database import Base, get_db
from strands.main import app
from strands.services.notification_service import get_notifier

# Import all models so they register with Base.metadata
from strands.models.user import User                                           # noqa: F401
from strands.models.friendship import Friendship                               # noqa: F401
from strands.models.group import Group, GroupMember, GroupInvite, GroupReadStatus  # noqa: F401
from strands.models.media import Media                                         # noqa: F401
from strands.models.strand import Strand, StrandMedia, StrandShare, StrandPin, StrandFire  # noqa: F401
from strands.models.comment import StrandComment                               # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


class RecordingNotifier:
    """Captures notifications instead of delivering them."""

    def __init__(self):
        self.sent = []

    def notify(self, user_id, notification):
        self.sent.append((user_id, notification))

    def to(self, user_id):
        return [n for uid, n in self.sent if uid == user_id]


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def notifier():
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(db_engine, notifier):
    """FastAPI TestClient with the database and notifier dependencies overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: drive the API and return response JSON
# ---------------------------------------------------------------------------
def auth_headers(user: dict) -> dict:
    return {"X-User-Id": user["user_id"]}


def create_test_user(client: TestClient, username: str = None, display_name: str = None) -> dict:
    """Helper: POST /api/users and return response JSON."""
    username = username or f"user_{uuid.uuid4().hex[:8]}"
    resp = client.post("/api/users/", json={"username": username, "display_name": display_name or username})
    assert resp.status_code == 201, resp.text
    return resp.json()


def make_admin(db, user: dict) -> None:
    """Flip the global administrator flag directly in the database."""
    db.query(User).filter(User.user_id == user["user_id"]).update({"is_admin": True})
    db.commit()


def make_friends(client: TestClient, user: dict, other: dict) -> dict:
    """Helper: send a friend request from ``user`` and accept it as ``other``."""
    resp = client.post("/api/friends/requests", json={"user_id": other["user_id"]}, headers=auth_headers(user))
    assert resp.status_code == 201, resp.text
    request = resp.json()
    resp = client.put(
        f"/api/friends/requests/{request['friendship_id']}",
        json={"status": "accepted"},
        headers=auth_headers(other),
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_test_group(client: TestClient, creator: dict, name: str = "Test Group", members=()) -> dict:
    """Helper: POST /api/groups; ``members`` must already be friends of the creator."""
    resp = client.post(
        "/api/groups/",
        json={"name": name, "member_ids": [m["user_id"] for m in members]},
        headers=auth_headers(creator),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_strand(client: TestClient, author: dict, groups, content: str = "Hello strands", media_ids=()) -> dict:
    """Helper: POST /api/strands shared to ``groups``."""
    resp = client.post(
        "/api/strands/",
        json={
            "content": content,
            "group_ids": [g["group_id"] for g in groups],
            "media_ids": list(media_ids),
        },
        headers=auth_headers(author),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def register_media(client: TestClient, owner: dict, file_name: str = "photo.jpg", **overrides) -> dict:
    payload = {
        "media_url": f"https://cdn.example.com/{file_name}",
        "file_name": file_name,
        "file_size": 2048,
        "mime_type": "image/jpeg",
        "media_type": "image",
        "width": 800,
        "height": 600,
    }
    payload.update(overrides)
    resp = client.post("/api/media/", json=payload, headers=auth_headers(owner))
    assert resp.status_code == 201, resp.text
    return resp.json()
