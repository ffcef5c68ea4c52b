"""Friendship ledger: one bidirectional row per unordered user pair.

State machine: (none) -> pending -> accepted | blocked; accepted -> (none) on
unfriend. There is no transition out of ``blocked``.
"""
import logging
import uuid
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from strands.database import insert_ignore, utcnow
from strands.errors import AlreadyExists, Forbidden, InvalidState, NotFound, SelfReferenceError, ValidationError
from strands.models.friendship import Friendship, FriendshipStatus, ordered_pair
from strands.models.user import User
from strands.services.notification_service import Notification, Notifier, dispatch

logger = logging.getLogger(__name__)


def _pair_row(db: Session, user_id: str, other_id: str):
    user_a_id, user_b_id = ordered_pair(user_id, other_id)
    return (
        db.query(Friendship)
        .filter(Friendship.user_a_id == user_a_id, Friendship.user_b_id == user_b_id)
        .first()
    )


def _rows_touching(db: Session, user_id: str):
    return db.query(Friendship).filter(
        or_(Friendship.user_a_id == user_id, Friendship.user_b_id == user_id)
    )


def _display_name(db: Session, user_id: str) -> str:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        return "Someone"
    return user.display_name or user.username


def accepted_friend_ids(db: Session, user_id: str) -> set[str]:
    """Ids of every user with an accepted friendship to ``user_id``."""
    rows = _rows_touching(db, user_id).filter(Friendship.status == FriendshipStatus.accepted).all()
    return {row.counterpart_of(user_id) for row in rows}


def request_friendship(db: Session, requester_id: str, target_id: str, notifier: Notifier) -> Friendship:
    """Create a pending request oriented requester -> target.

    The pair's unique constraint decides between concurrent requests, so a
    duplicate in either direction surfaces as ``AlreadyExists``.
    """
    if requester_id == target_id:
        raise SelfReferenceError()
    if not db.query(User).filter(User.user_id == target_id).first():
        raise NotFound("User not found")

    user_a_id, user_b_id = ordered_pair(requester_id, target_id)
    friendship_id = str(uuid.uuid4())
    inserted = insert_ignore(
        db,
        Friendship,
        {
            "friendship_id": friendship_id,
            "user_a_id": user_a_id,
            "user_b_id": user_b_id,
            "requested_by": requester_id,
            "status": FriendshipStatus.pending,
        },
        ["user_a_id", "user_b_id"],
    )
    if not inserted:
        db.rollback()
        existing = _pair_row(db, requester_id, target_id)
        if existing is not None and existing.status == FriendshipStatus.accepted:
            raise AlreadyExists("Already friends")
        if existing is not None and existing.status == FriendshipStatus.pending:
            raise AlreadyExists("Friend request already sent")
        raise AlreadyExists()
    db.commit()
    friendship = db.query(Friendship).filter(Friendship.friendship_id == friendship_id).one()
    logger.info("Friend request %s from %s to %s", friendship_id, requester_id, target_id)

    sender = _display_name(db, requester_id)
    dispatch(notifier, target_id, Notification(
        title="New Friend Request",
        body=f"{sender} sent you a friend request",
        tag="friend-request",
        data={"url": "/friends", "type": "friend_request"},
    ))
    return friendship


def respond_to_request(
    db: Session, responder_id: str, request_id: str, decision: str, notifier: Notifier
) -> Friendship:
    """Accept (-> accepted) or decline (-> blocked) a pending request addressed to ``responder_id``."""
    if decision not in ("accepted", "declined"):
        raise ValidationError("Status must be either accepted or declined")

    friendship = db.query(Friendship).filter(Friendship.friendship_id == request_id).first()
    if not friendship:
        raise NotFound("Friend request not found")
    if friendship.recipient_id != responder_id:
        raise Forbidden("Unauthorized to update this request")
    if friendship.status != FriendshipStatus.pending:
        raise InvalidState("Friend request is not pending")

    friendship.status = FriendshipStatus.accepted if decision == "accepted" else FriendshipStatus.blocked
    friendship.updated_at = utcnow()
    db.commit()
    db.refresh(friendship)
    logger.info("Friend request %s %s by %s", request_id, friendship.status.value, responder_id)

    if friendship.status == FriendshipStatus.accepted:
        receiver = _display_name(db, responder_id)
        dispatch(notifier, friendship.requested_by, Notification(
            title="Friend Request Accepted",
            body=f"{receiver} accepted your friend request",
            tag="friend-accepted",
            data={"url": "/friends", "type": "friend_accepted"},
        ))
    return friendship


def remove_friendship(db: Session, user_id: str, other_id: str) -> None:
    friendship = _pair_row(db, user_id, other_id)
    if not friendship or friendship.status != FriendshipStatus.accepted:
        raise NotFound("Friendship not found")
    db.delete(friendship)
    db.commit()
    logger.info("Friendship between %s and %s removed", user_id, other_id)


def _annotate(db: Session, row: Friendship, user_id: str) -> dict[str, Any]:
    counterpart_id = row.counterpart_of(user_id)
    counterpart = db.query(User).filter(User.user_id == counterpart_id).first()
    return {
        "friendship_id": row.friendship_id,
        "status": row.status.value,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
        "user": counterpart,
        "is_requester": row.requested_by == user_id,
        "is_received": row.recipient_id == user_id,
    }


def list_relationships(db: Session, user_id: str, status_filter: FriendshipStatus | None = None) -> list[dict[str, Any]]:
    """Every row touching ``user_id``, newest first, annotated with the counterpart and direction."""
    query = _rows_touching(db, user_id)
    if status_filter is not None:
        query = query.filter(Friendship.status == status_filter)
    rows = query.order_by(Friendship.created_at.desc()).all()
    return [_annotate(db, row, user_id) for row in rows]
