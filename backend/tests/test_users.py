"""Tests for User endpoints and principal resolution."""
import uuid

from sqlalchemy import event

from strands.models.user import User
from tests.conftest import auth_headers, create_test_user, make_admin


class TestUserCRUD:
    """User create / get / update / search."""

    def test_create_user(self, client):
        data = create_test_user(client, username="alice", display_name="Alice")
        assert data["username"] == "alice"
        assert data["display_name"] == "Alice"
        assert data["is_admin"] is False
        assert "user_id" in data

    def test_display_name_defaults_to_username(self, client):
        resp = client.post("/api/users/", json={"username": "bob"})
        assert resp.status_code == 201
        assert resp.json()["display_name"] == "bob"

    def test_duplicate_username_conflicts(self, client):
        create_test_user(client, username="carol")
        resp = client.post("/api/users/", json={"username": "Carol"})
        assert resp.status_code == 409
        assert resp.json()["message"] == "Username already taken"

    def test_concurrent_signup_conflicts(self, client):
        """A row committed between the uniqueness check and the insert still yields 409."""
        def _claim_first(mapper, connection, target):
            connection.execute(
                User.__table__.insert().values(
                    user_id=str(uuid.uuid4()), username=target.username, display_name=target.username
                )
            )

        event.listen(User, "before_insert", _claim_first)
        try:
            resp = client.post("/api/users/", json={"username": "dave"})
        finally:
            event.remove(User, "before_insert", _claim_first)
        assert resp.status_code == 409
        assert resp.json()["message"] == "Username already taken"

    def test_short_username_is_validation_error(self, client):
        resp = client.post("/api/users/", json={"username": "ab"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Validation error"
        assert resp.json()["errors"]

    def test_get_user(self, client):
        me = create_test_user(client)
        other = create_test_user(client, username="dave", display_name="Dave")
        resp = client.get(f"/api/users/{other['user_id']}", headers=auth_headers(me))
        assert resp.status_code == 200
        assert resp.json()["display_name"] == "Dave"

    def test_get_user_not_found(self, client):
        me = create_test_user(client)
        resp = client.get("/api/users/00000000-0000-0000-0000-000000000000", headers=auth_headers(me))
        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found"

    def test_get_me(self, client):
        me = create_test_user(client, username="erin")
        resp = client.get("/api/users/me", headers=auth_headers(me))
        assert resp.status_code == 200
        assert resp.json()["user_id"] == me["user_id"]

    def test_update_profile(self, client):
        me = create_test_user(client)
        resp = client.patch("/api/users/me", json={
            "display_name": "Updated Name",
            "profile_picture_url": "https://cdn.example.com/me.png",
        }, headers=auth_headers(me))
        assert resp.status_code == 200
        assert resp.json()["display_name"] == "Updated Name"
        assert resp.json()["profile_picture_url"] == "https://cdn.example.com/me.png"

    def test_search_is_case_insensitive_and_excludes_self(self, client):
        me = create_test_user(client, username="frank_me")
        create_test_user(client, username="Frankie")
        create_test_user(client, username="george")
        resp = client.get("/api/users/search", params={"q": "FRANK"}, headers=auth_headers(me))
        assert resp.status_code == 200
        assert [u["username"] for u in resp.json()] == ["Frankie"]

    def test_search_limits_results(self, client):
        me = create_test_user(client)
        for i in range(25):
            create_test_user(client, username=f"match_{i:02d}")
        resp = client.get("/api/users/search", params={"q": "match"}, headers=auth_headers(me))
        assert len(resp.json()) == 20


class TestPrincipal:
    """The X-User-Id header resolves the principal."""

    def test_missing_header_is_401(self, client):
        resp = client.get("/api/users/me")
        assert resp.status_code == 401
        assert resp.json()["message"] == "Authorization token is required"

    def test_unknown_user_is_401(self, client):
        resp = client.get("/api/users/me", headers={"X-User-Id": "nobody"})
        assert resp.status_code == 401

    def test_admin_flag_read_from_database(self, client, db):
        me = create_test_user(client)
        make_admin(db, me)
        resp = client.get("/api/users/me", headers=auth_headers(me))
        assert resp.json()["is_admin"] is True

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}
