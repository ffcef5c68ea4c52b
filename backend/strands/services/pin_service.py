"""Pins (per-group highlight) and fires (per-user reaction)."""
import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from strands.database import insert_ignore, upsert, utcnow
from strands.dependencies import Principal
from strands.errors import Forbidden, NotFoundOrAccessDenied, NotPinned
from strands.models.group import GroupRole
from strands.models.strand import StrandFire, StrandPin
from strands.services.group_service import get_membership
from strands.services.visibility_service import is_shared_to, require_access

logger = logging.getLogger(__name__)


def _authorize_pin(db: Session, principal: Principal, strand_id: str, group_id: str) -> None:
    require_access(db, principal, strand_id)
    if not is_shared_to(db, strand_id, group_id):
        raise NotFoundOrAccessDenied("Strand not found in this group")
    if principal.is_admin:
        return
    membership = get_membership(db, group_id, principal.user_id)
    if not membership:
        raise NotFoundOrAccessDenied("Strand not found in this group")
    if membership.role != GroupRole.admin:
        raise Forbidden("Only group admins can pin strands")


def pin_strand(db: Session, principal: Principal, strand_id: str, group_id: str) -> dict[str, Any]:
    """Pin ``strand_id`` in ``group_id``; re-pinning refreshes pinner and time."""
    _authorize_pin(db, principal, strand_id, group_id)
    now = utcnow()
    upsert(
        db,
        StrandPin,
        {"strand_id": strand_id, "group_id": group_id, "pinned_by": principal.user_id, "pinned_at": now},
        ["strand_id", "group_id"],
        ["pinned_by", "pinned_at"],
    )
    db.commit()
    logger.info("Strand %s pinned in group %s by %s", strand_id, group_id, principal.user_id)
    return {"strand_id": strand_id, "group_id": group_id, "pinned_by": principal.user_id, "pinned_at": now}


def unpin_strand(db: Session, principal: Principal, strand_id: str, group_id: str) -> None:
    _authorize_pin(db, principal, strand_id, group_id)
    deleted = (
        db.query(StrandPin)
        .filter(StrandPin.strand_id == strand_id, StrandPin.group_id == group_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        db.rollback()
        raise NotPinned()
    db.commit()
    logger.info("Strand %s unpinned from group %s by %s", strand_id, group_id, principal.user_id)


def fire_state(db: Session, strand_id: str, user_id: str) -> dict[str, Any]:
    fire_count = (
        db.query(func.count()).select_from(StrandFire).filter(StrandFire.strand_id == strand_id).scalar()
    )
    has_user_fired = (
        db.query(StrandFire)
        .filter(StrandFire.strand_id == strand_id, StrandFire.user_id == user_id)
        .first()
        is not None
    )
    return {"fire_count": fire_count, "has_user_fired": has_user_fired}


def toggle_fire(db: Session, principal: Principal, strand_id: str, add: bool) -> dict[str, Any]:
    """Add or remove the caller's fire. Both directions are idempotent."""
    require_access(db, principal, strand_id)
    if add:
        insert_ignore(
            db,
            StrandFire,
            {"strand_id": strand_id, "user_id": principal.user_id, "created_at": utcnow()},
            ["strand_id", "user_id"],
        )
    else:
        db.query(StrandFire).filter(
            StrandFire.strand_id == strand_id, StrandFire.user_id == principal.user_id
        ).delete(synchronize_session=False)
    db.commit()
    return fire_state(db, strand_id, principal.user_id)
