"""Group invite issuing and redemption.

Invites are multi-use: any number of users may redeem a token until it
expires. There is no revocation besides expiry.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from strands.config import settings
from strands.database import insert_ignore, utcnow
from strands.errors import InvalidOrExpired
from strands.models.group import Group, GroupInvite, GroupRole, GroupMember
from strands.services.group_service import require_membership

logger = logging.getLogger(__name__)

INVITE_TTL = timedelta(days=30)
TOKEN_BYTES = 32  # 256 bits, hex-encoded to 64 chars


def invite_url(token: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/invite/{token}"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored timestamp is UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def issue_invite(db: Session, issuer_id: str, group_id: str) -> dict[str, Any]:
    require_membership(db, group_id, issuer_id)
    now = utcnow()
    invite = GroupInvite(
        group_id=group_id,
        token=secrets.token_hex(TOKEN_BYTES),
        created_by=issuer_id,
        expires_at=now + INVITE_TTL,
        created_at=now,
    )
    db.add(invite)
    db.commit()
    db.refresh(invite)
    logger.info("Invite %s issued for group %s by %s", invite.invite_id, group_id, issuer_id)
    return {
        "invite_id": invite.invite_id,
        "token": invite.token,
        "invite_url": invite_url(invite.token),
        "expires_at": _as_utc(invite.expires_at),
        "created_at": _as_utc(invite.created_at),
    }


def _valid_invite(db: Session, token: str, now: Optional[datetime] = None) -> tuple[GroupInvite, Group]:
    now = now or utcnow()
    row = (
        db.query(GroupInvite, Group)
        .join(Group, Group.group_id == GroupInvite.group_id)
        .filter(GroupInvite.token == token, GroupInvite.expires_at > now)
        .first()
    )
    if not row:
        raise InvalidOrExpired()
    return row


def preview_invite(db: Session, token: str) -> dict[str, Any]:
    invite, group = _valid_invite(db, token)
    return {"group_id": group.group_id, "group_name": group.name, "expires_at": _as_utc(invite.expires_at)}


def redeem_invite(db: Session, user_id: str, token: str) -> dict[str, Any]:
    """Join the invite's group; redeeming for a group already joined is a no-op."""
    invite, group = _valid_invite(db, token)
    joined = insert_ignore(
        db,
        GroupMember,
        {"group_id": invite.group_id, "user_id": user_id, "role": GroupRole.member},
        ["group_id", "user_id"],
    )
    db.commit()
    if joined:
        logger.info("User %s joined group %s via invite %s", user_id, group.group_id, invite.invite_id)
        message = "Successfully joined group"
    else:
        message = "You are already a member of this group"
    return {"message": message, "group_id": group.group_id, "already_member": not joined}
