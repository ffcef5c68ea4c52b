"""Tests for pinning strands in groups and fire reactions."""
import uuid

from strands.models.strand import StrandFire, StrandPin
from tests.conftest import auth_headers, create_strand, create_test_group, create_test_user, make_admin, make_friends


def _setup(client):
    admin = create_test_user(client)
    member = create_test_user(client)
    make_friends(client, admin, member)
    group = create_test_group(client, admin, members=[member])
    strand = create_strand(client, member, [group])
    return admin, member, group, strand


def _pin(client, user, strand_id, group_id):
    return client.post(f"/api/strands/{strand_id}/pin", json={"group_id": group_id}, headers=auth_headers(user))


def _unpin(client, user, strand_id, group_id):
    return client.request(
        "DELETE", f"/api/strands/{strand_id}/pin", json={"group_id": group_id}, headers=auth_headers(user)
    )


class TestPins:
    """Group admins pin; re-pinning refreshes."""

    def test_group_admin_pins(self, client):
        admin, _, group, strand = _setup(client)
        resp = _pin(client, admin, strand["strand_id"], group["group_id"])
        assert resp.status_code == 200
        assert resp.json()["pinned_by"] == admin["user_id"]

    def test_member_cannot_pin(self, client):
        _, member, group, strand = _setup(client)
        resp = _pin(client, member, strand["strand_id"], group["group_id"])
        assert resp.status_code == 403

    def test_repin_overwrites(self, client, db):
        admin, member, group, strand = _setup(client)
        client.patch(
            f"/api/groups/{group['group_id']}/members/{member['user_id']}",
            json={"role": "admin"},
            headers=auth_headers(admin),
        )
        first = _pin(client, admin, strand["strand_id"], group["group_id"]).json()
        second = _pin(client, member, strand["strand_id"], group["group_id"]).json()
        assert second["pinned_by"] == member["user_id"]
        assert second["pinned_at"] >= first["pinned_at"]
        pins = db.query(StrandPin).all()
        assert len(pins) == 1
        assert pins[0].pinned_by == member["user_id"]

    def test_pin_requires_share_to_group(self, client):
        admin, _, group, strand = _setup(client)
        other = create_test_group(client, admin, name="Other")
        resp = _pin(client, admin, strand["strand_id"], other["group_id"])
        assert resp.status_code == 404

    def test_pin_invisible_strand(self, client):
        _, _, group, strand = _setup(client)
        outsider = create_test_user(client)
        own_group = create_test_group(client, outsider)
        resp = _pin(client, outsider, strand["strand_id"], own_group["group_id"])
        assert resp.status_code == 404

    def test_pin_into_unjoined_group_matches_missing_group(self, client):
        _, member, group, _ = _setup(client)
        erin = create_test_user(client)
        make_friends(client, member, erin)
        side = create_test_group(client, member, name="Side", members=[erin])
        strand = create_strand(client, member, [group, side])

        unjoined = _pin(client, erin, strand["strand_id"], group["group_id"])
        missing = _pin(client, erin, strand["strand_id"], str(uuid.uuid4()))
        assert unjoined.status_code == 404
        assert unjoined.json() == missing.json()
        assert _unpin(client, erin, strand["strand_id"], group["group_id"]).status_code == 404

    def test_administrator_pins_without_group_role(self, client, db):
        _, _, group, strand = _setup(client)
        root = create_test_user(client)
        make_admin(db, root)
        assert _pin(client, root, strand["strand_id"], group["group_id"]).status_code == 200

    def test_unpin(self, client, db):
        admin, _, group, strand = _setup(client)
        _pin(client, admin, strand["strand_id"], group["group_id"])
        resp = _unpin(client, admin, strand["strand_id"], group["group_id"])
        assert resp.status_code == 204
        assert db.query(StrandPin).count() == 0

    def test_unpin_when_not_pinned(self, client):
        admin, _, group, strand = _setup(client)
        resp = _unpin(client, admin, strand["strand_id"], group["group_id"])
        assert resp.status_code == 404
        assert resp.json()["message"] == "Strand is not pinned in this group"

    def test_member_cannot_unpin(self, client):
        admin, member, group, strand = _setup(client)
        _pin(client, admin, strand["strand_id"], group["group_id"])
        resp = _unpin(client, member, strand["strand_id"], group["group_id"])
        assert resp.status_code == 403


class TestFires:
    """One fire per user per strand; counts are recomputed."""

    def test_fire_and_unfire(self, client):
        admin, member, _, strand = _setup(client)
        sid = strand["strand_id"]
        resp = client.post(f"/api/strands/{sid}/fire", headers=auth_headers(admin))
        assert resp.json() == {"fire_count": 1, "has_user_fired": True}
        resp = client.post(f"/api/strands/{sid}/fire", headers=auth_headers(member))
        assert resp.json() == {"fire_count": 2, "has_user_fired": True}
        resp = client.delete(f"/api/strands/{sid}/fire", headers=auth_headers(admin))
        assert resp.json() == {"fire_count": 1, "has_user_fired": False}

    def test_fire_is_idempotent(self, client, db):
        admin, _, _, strand = _setup(client)
        sid = strand["strand_id"]
        client.post(f"/api/strands/{sid}/fire", headers=auth_headers(admin))
        resp = client.post(f"/api/strands/{sid}/fire", headers=auth_headers(admin))
        assert resp.json()["fire_count"] == 1
        assert db.query(StrandFire).count() == 1

    def test_unfire_without_fire(self, client):
        admin, _, _, strand = _setup(client)
        resp = client.delete(f"/api/strands/{strand['strand_id']}/fire", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json() == {"fire_count": 0, "has_user_fired": False}

    def test_fire_invisible_strand(self, client):
        _, _, _, strand = _setup(client)
        outsider = create_test_user(client)
        resp = client.post(f"/api/strands/{strand['strand_id']}/fire", headers=auth_headers(outsider))
        assert resp.status_code == 404
