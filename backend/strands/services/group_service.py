"""Group roster, roles and the last-admin invariant.

Every path that can drop a group's admin count (remove, leave, demote) runs
the same sequence inside one transaction: lock the group row, count admins
fresh, then mutate. Concurrent removals of the last two admins therefore
serialize on the group row instead of both reading "2 admins".
"""
import logging
from typing import Any, Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from strands.database import insert_ignore, upsert, utcnow
from strands.dependencies import Principal
from strands.errors import Forbidden, LastAdminError, NoNewMembers, NotAMember, NotFound, NotFriends
from strands.models.group import Group, GroupMember, GroupReadStatus, GroupRole
from strands.services.friendship_service import accepted_friend_ids

logger = logging.getLogger(__name__)


def _unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(str(i) for i in ids))


def get_membership(db: Session, group_id: str, user_id: str) -> GroupMember | None:
    return (
        db.query(GroupMember)
        .filter(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
        .first()
    )


def require_membership(db: Session, group_id: str, user_id: str) -> GroupMember:
    membership = get_membership(db, group_id, user_id)
    if not membership:
        raise NotAMember()
    return membership


def require_group_visible(db: Session, principal: Principal, group_id: str) -> Group:
    """Members see their groups; administrators see every existing group."""
    if not principal.is_admin:
        require_membership(db, group_id, principal.user_id)
    group = db.query(Group).filter(Group.group_id == group_id).first()
    if not group:
        raise NotAMember()
    return group


def _lock_group(db: Session, group_id: str) -> Group:
    group = db.query(Group).filter(Group.group_id == group_id).with_for_update().first()
    if not group:
        raise NotAMember()
    return group


def _fresh_membership(db: Session, group_id: str, user_id: str) -> GroupMember | None:
    return (
        db.query(GroupMember)
        .filter(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
        .populate_existing()
        .first()
    )


def _admin_count(db: Session, group_id: str) -> int:
    return (
        db.query(func.count())
        .select_from(GroupMember)
        .filter(GroupMember.group_id == group_id, GroupMember.role == GroupRole.admin)
        .scalar()
    )


def _guarded_delete(db: Session, group_id: str, target_user_id: str, last_admin_message: str) -> None:
    _lock_group(db, group_id)
    target = _fresh_membership(db, group_id, target_user_id)
    if not target:
        db.rollback()
        raise NotFound("User is not a member of this group")
    if target.role == GroupRole.admin and _admin_count(db, group_id) <= 1:
        db.rollback()
        raise LastAdminError(last_admin_message)
    db.delete(target)
    db.commit()


def create_group(db: Session, creator_id: str, name: str, member_ids: Iterable[str] = ()) -> Group:
    """Create a group with the creator as admin and ``member_ids`` as members.

    Every member must be an accepted friend of the creator; otherwise nothing
    is persisted.
    """
    group = Group(name=name, created_by=creator_id)
    db.add(group)
    db.flush()
    db.add(GroupMember(group_id=group.group_id, user_id=creator_id, role=GroupRole.admin))
    db.flush()

    member_ids = [m for m in _unique(member_ids) if m != creator_id]
    if member_ids:
        friends = accepted_friend_ids(db, creator_id)
        if any(m not in friends for m in member_ids):
            db.rollback()
            raise NotFriends()
        for member_id in member_ids:
            insert_ignore(
                db,
                GroupMember,
                {"group_id": group.group_id, "user_id": member_id, "role": GroupRole.member},
                ["group_id", "user_id"],
            )

    db.commit()
    db.refresh(group)
    logger.info("Created group '%s' (%s) by user %s with %d member(s)", group.name, group.group_id, creator_id, len(member_ids))
    return group


def list_groups(db: Session, user_id: str) -> list[dict[str, Any]]:
    rows = (
        db.query(Group, GroupMember, GroupReadStatus.last_read_at)
        .join(GroupMember, GroupMember.group_id == Group.group_id)
        .outerjoin(
            GroupReadStatus,
            (GroupReadStatus.group_id == Group.group_id) & (GroupReadStatus.user_id == user_id),
        )
        .filter(GroupMember.user_id == user_id)
        .order_by(Group.created_at.desc())
        .all()
    )
    return [
        {
            "group_id": group.group_id,
            "name": group.name,
            "created_by": group.created_by,
            "created_at": group.created_at,
            "updated_at": group.updated_at,
            "user_role": membership.role.value,
            "joined_at": membership.joined_at,
            "last_read_at": last_read_at,
        }
        for group, membership, last_read_at in rows
    ]


def get_group(db: Session, principal: Principal, group_id: str) -> Group:
    return require_group_visible(db, principal, group_id)


def add_members(db: Session, actor_id: str, group_id: str, member_ids: Iterable[str]) -> list[str]:
    """Add accepted friends of ``actor_id``; returns the ids actually inserted."""
    require_membership(db, group_id, actor_id)
    member_ids = _unique(member_ids)

    friends = accepted_friend_ids(db, actor_id)
    if any(m not in friends for m in member_ids):
        raise NotFriends()

    added = [
        member_id
        for member_id in member_ids
        if insert_ignore(
            db,
            GroupMember,
            {"group_id": group_id, "user_id": member_id, "role": GroupRole.member},
            ["group_id", "user_id"],
        )
    ]
    if not added:
        db.rollback()
        raise NoNewMembers()
    db.commit()
    logger.info("User %s added %d member(s) to group %s", actor_id, len(added), group_id)
    return added


def remove_member(db: Session, actor_id: str, group_id: str, target_user_id: str) -> None:
    actor = require_membership(db, group_id, actor_id)
    is_self = actor_id == target_user_id
    if not is_self and actor.role != GroupRole.admin:
        raise Forbidden("Only admins can remove other members")

    _guarded_delete(db, group_id, target_user_id, "Cannot remove the last admin from the group")
    logger.info("User %s removed %s from group %s", actor_id, target_user_id, group_id)


def leave_group(db: Session, user_id: str, group_id: str) -> None:
    require_membership(db, group_id, user_id)
    _guarded_delete(
        db,
        group_id,
        user_id,
        "Cannot leave group as the last admin. Please transfer admin or delete the group.",
    )
    logger.info("User %s left group %s", user_id, group_id)


def set_member_role(db: Session, actor_id: str, group_id: str, target_user_id: str, role: GroupRole) -> GroupMember:
    """Promote or demote a member; only admins may, and the last admin cannot be demoted."""
    actor = require_membership(db, group_id, actor_id)
    if actor.role != GroupRole.admin:
        raise Forbidden("Only admins can change member roles")

    _lock_group(db, group_id)
    target = _fresh_membership(db, group_id, target_user_id)
    if not target:
        db.rollback()
        raise NotFound("User is not a member of this group")
    if target.role == GroupRole.admin and role == GroupRole.member and _admin_count(db, group_id) <= 1:
        db.rollback()
        raise LastAdminError("Cannot demote the last admin of the group")
    target.role = role
    db.commit()
    db.refresh(target)
    logger.info("User %s set role of %s in group %s to %s", actor_id, target_user_id, group_id, role.value)
    return target


def delete_group(db: Session, actor_id: str, group_id: str) -> None:
    actor = require_membership(db, group_id, actor_id)
    if actor.role != GroupRole.admin:
        raise Forbidden("Only group admins can delete groups")
    group = db.query(Group).filter(Group.group_id == group_id).one()
    db.delete(group)
    db.commit()
    logger.info("Group %s deleted by %s", group_id, actor_id)


def mark_group_read(db: Session, principal: Principal, group_id: str) -> None:
    require_group_visible(db, principal, group_id)
    now = utcnow()
    upsert(
        db,
        GroupReadStatus,
        {"user_id": principal.user_id, "group_id": group_id, "last_read_at": now},
        ["user_id", "group_id"],
        ["last_read_at"],
    )
    db.commit()
