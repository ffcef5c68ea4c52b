"""Strand comments, optionally scoped to one of the strand's groups."""
import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from strands.dependencies import Principal
from strands.errors import Forbidden, NotFound, ValidationError
from strands.models.comment import StrandComment
from strands.models.group import GroupMember
from strands.models.user import User
from strands.services.group_service import get_membership, require_group_visible
from strands.services.notification_service import Notification, Notifier, dispatch
from strands.services.visibility_service import is_shared_to, require_access

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 1000


def list_comments(
    db: Session, principal: Principal, strand_id: str, group_id: Optional[str] = None
) -> list[StrandComment]:
    require_access(db, principal, strand_id)
    query = db.query(StrandComment).filter(StrandComment.strand_id == strand_id)

    if group_id:
        require_group_visible(db, principal, group_id)
        query = query.filter(or_(StrandComment.group_id == group_id, StrandComment.group_id.is_(None)))
    elif not principal.is_admin:
        my_groups = db.query(GroupMember.group_id).filter(GroupMember.user_id == principal.user_id)
        query = query.filter(or_(StrandComment.group_id.is_(None), StrandComment.group_id.in_(my_groups)))

    return query.order_by(StrandComment.created_at.asc()).all()


def create_comment(
    db: Session,
    principal: Principal,
    strand_id: str,
    content: str,
    notifier: Notifier,
    group_id: Optional[str] = None,
) -> StrandComment:
    """Add a comment; the strand author and earlier commenters are notified."""
    strand = require_access(db, principal, strand_id)

    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment content cannot be empty")
    if len(content) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment content must be {MAX_COMMENT_LENGTH} characters or less")

    if group_id:
        if not is_shared_to(db, strand_id, group_id):
            raise ValidationError("Strand is not shared to this group")
        if not principal.is_admin and not get_membership(db, group_id, principal.user_id):
            raise Forbidden("You are not a member of this group")

    previous_commenters = {
        user_id
        for (user_id,) in db.query(StrandComment.user_id).filter(StrandComment.strand_id == strand_id).distinct()
    }

    comment = StrandComment(strand_id=strand_id, user_id=principal.user_id, group_id=group_id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info("Comment %s added to strand %s by %s", comment.comment_id, strand_id, principal.user_id)

    commenter = db.query(User).filter(User.user_id == principal.user_id).one()
    name = commenter.display_name or commenter.username
    data = {"url": f"/strands/{strand_id}", "type": "strand_comment", "strand_id": strand_id}
    if strand.user_id != principal.user_id:
        dispatch(notifier, strand.user_id, Notification(
            title="New comment on your strand",
            body=f"{name} commented on your strand",
            tag=f"strand-comment-{strand_id}",
            data=data,
        ))
    others = previous_commenters - {principal.user_id, strand.user_id}
    if others:
        dispatch(notifier, sorted(others), Notification(
            title="New comment on strand",
            body=f"{name} also commented on a strand you commented on",
            tag=f"strand-comment-{strand_id}",
            data=data,
        ))
    return comment


def delete_comment(db: Session, principal: Principal, strand_id: str, comment_id: str) -> None:
    require_access(db, principal, strand_id)
    comment = (
        db.query(StrandComment)
        .filter(StrandComment.comment_id == comment_id, StrandComment.strand_id == strand_id)
        .first()
    )
    if not comment:
        raise NotFound("Comment not found")
    if comment.user_id != principal.user_id and not principal.is_admin:
        raise Forbidden()
    db.delete(comment)
    db.commit()
    logger.info("Comment %s deleted by %s", comment_id, principal.user_id)
