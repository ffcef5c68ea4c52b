"""Tests for group invite issue, preview and redemption."""
from datetime import timedelta

from strands.database import utcnow
from strands.models.group import GroupInvite, GroupMember
from tests.conftest import auth_headers, create_test_group, create_test_user


def _issue(client, issuer, group):
    resp = client.post(f"/api/groups/{group['group_id']}/invite", headers=auth_headers(issuer))
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestInvites:
    """Invite links."""

    def test_issue_invite(self, client):
        admin = create_test_user(client)
        group = create_test_group(client, admin)
        invite = _issue(client, admin, group)
        assert len(invite["token"]) == 64
        assert invite["invite_url"].endswith(f"/invite/{invite['token']}")

    def test_invite_expires_in_thirty_days(self, client, db):
        admin = create_test_user(client)
        group = create_test_group(client, admin)
        invite = _issue(client, admin, group)
        row = db.query(GroupInvite).filter(GroupInvite.token == invite["token"]).one()
        assert row.expires_at - row.created_at == timedelta(days=30)

    def test_tokens_are_unique(self, client):
        admin = create_test_user(client)
        group = create_test_group(client, admin)
        tokens = {_issue(client, admin, group)["token"] for _ in range(5)}
        assert len(tokens) == 5

    def test_outsider_cannot_issue(self, client):
        admin = create_test_user(client)
        group = create_test_group(client, admin)
        outsider = create_test_user(client)
        resp = client.post(f"/api/groups/{group['group_id']}/invite", headers=auth_headers(outsider))
        assert resp.status_code == 404

    def test_preview_without_authentication(self, client):
        admin = create_test_user(client)
        group = create_test_group(client, admin, name="Climbing")
        invite = _issue(client, admin, group)
        resp = client.get(f"/api/groups/invite/{invite['token']}")
        assert resp.status_code == 200
        assert resp.json()["group_name"] == "Climbing"
        assert resp.json()["group_id"] == group["group_id"]

    def test_redeem_joins_as_member(self, client, db):
        admin = create_test_user(client)
        group = create_test_group(client, admin)
        invite = _issue(client, admin, group)
        guest = create_test_user(client)
        resp = client.post(f"/api/groups/invite/{invite['token']}/join", headers=auth_headers(guest))
        assert resp.status_code == 200
        assert resp.json()["already_member"] is False
        membership = db.query(GroupMember).filter(GroupMember.user_id == guest["user_id"]).one()
        assert membership.role.value == "member"

    def test_redeem_is_idempotent(self, client, db):
        admin = create_test_user(client)
        group = create_test_group(client, admin)
        invite = _issue(client, admin, group)
        guest = create_test_user(client)
        client.post(f"/api/groups/invite/{invite['token']}/join", headers=auth_headers(guest))
        resp = client.post(f"/api/groups/invite/{invite['token']}/join", headers=auth_headers(guest))
        assert resp.status_code == 200
        assert resp.json()["already_member"] is True
        assert resp.json()["message"] == "You are already a member of this group"
        assert db.query(GroupMember).filter(GroupMember.group_id == group["group_id"]).count() == 2

    def test_invites_are_multi_use(self, client):
        admin = create_test_user(client)
        group = create_test_group(client, admin)
        invite = _issue(client, admin, group)
        for _ in range(3):
            guest = create_test_user(client)
            resp = client.post(f"/api/groups/invite/{invite['token']}/join", headers=auth_headers(guest))
            assert resp.json()["already_member"] is False
        members = client.get(f"/api/groups/{group['group_id']}", headers=auth_headers(admin)).json()["members"]
        assert len(members) == 4

    def test_expired_invite(self, client, db):
        admin = create_test_user(client)
        group = create_test_group(client, admin)
        invite = _issue(client, admin, group)
        db.query(GroupInvite).filter(GroupInvite.token == invite["token"]).update(
            {"expires_at": utcnow() - timedelta(minutes=1)}
        )
        db.commit()

        guest = create_test_user(client)
        resp = client.post(f"/api/groups/invite/{invite['token']}/join", headers=auth_headers(guest))
        assert resp.status_code == 404
        assert resp.json()["message"] == "Invalid or expired invite token"
        assert client.get(f"/api/groups/invite/{invite['token']}").status_code == 404

    def test_unknown_token(self, client):
        guest = create_test_user(client)
        resp = client.post("/api/groups/invite/deadbeef/join", headers=auth_headers(guest))
        assert resp.status_code == 404

    def test_redeem_requires_principal(self, client):
        admin = create_test_user(client)
        group = create_test_group(client, admin)
        invite = _issue(client, admin, group)
        resp = client.post(f"/api/groups/invite/{invite['token']}/join")
        assert resp.status_code == 401
