"""Content visibility resolver.

A strand is readable by a user iff it is shared into at least one group the
user belongs to; administrators read everything. Absent and invisible strands
raise the same ``NotFoundOrAccessDenied``.
"""
from typing import Iterable

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from strands.database import insert_ignore
from strands.dependencies import Principal
from strands.errors import NotFoundOrAccessDenied
from strands.models.group import GroupMember
from strands.models.strand import Strand, StrandShare


def visible_strand_ids(user_id: str):
    """Subquery of strand ids shared into any group ``user_id`` is a member of."""
    return (
        select(StrandShare.strand_id)
        .join(GroupMember, GroupMember.group_id == StrandShare.group_id)
        .where(GroupMember.user_id == user_id)
    )


def can_access(db: Session, principal: Principal, strand_id: str) -> bool:
    if principal.is_admin:
        return True
    shared_to_member_group = exists().where(
        StrandShare.strand_id == strand_id,
        StrandShare.group_id == GroupMember.group_id,
        GroupMember.user_id == principal.user_id,
    )
    return db.query(shared_to_member_group).scalar()


def require_access(db: Session, principal: Principal, strand_id: str) -> Strand:
    """Load a strand the principal may read, or raise ``NotFoundOrAccessDenied``."""
    if not can_access(db, principal, strand_id):
        raise NotFoundOrAccessDenied("Strand not found or access denied")
    strand = db.query(Strand).filter(Strand.strand_id == strand_id).first()
    if not strand:
        raise NotFoundOrAccessDenied("Strand not found or access denied")
    return strand


def is_shared_to(db: Session, strand_id: str, group_id: str) -> bool:
    return db.query(
        exists().where(StrandShare.strand_id == strand_id, StrandShare.group_id == group_id)
    ).scalar()


def share_to_groups(db: Session, strand_id: str, group_ids: Iterable[str]) -> None:
    for group_id in group_ids:
        insert_ignore(db, StrandShare, {"strand_id": strand_id, "group_id": group_id}, ["strand_id", "group_id"])
