"""Strand authoring: media references, create, read, edit, delete."""
import logging
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from strands.database import utcnow
from strands.dependencies import Principal
from strands.errors import Forbidden, ValidationError
from strands.models.group import GroupMember
from strands.models.media import Media
from strands.models.strand import Strand, StrandMedia
from strands.services.feed_service import serialize_strands
from strands.services.visibility_service import require_access, share_to_groups

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 5000


def _clean_content(content: Optional[str]) -> Optional[str]:
    if content is None:
        return None
    content = content.strip()
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"Content must be {MAX_CONTENT_LENGTH} characters or less")
    return content or None


def _unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(str(i) for i in ids))


def _owned_media(db: Session, user_id: str, media_ids: list[str]) -> list[str]:
    if not media_ids:
        return []
    owned = {
        media_id
        for (media_id,) in db.query(Media.media_id)
        .filter(Media.media_id.in_(media_ids), Media.user_id == user_id)
        .all()
    }
    if len(owned) != len(media_ids):
        raise ValidationError("Media not found or not owned by you")
    return media_ids


def _link_media(db: Session, strand_id: str, media_ids: list[str]) -> None:
    for position, media_id in enumerate(media_ids):
        db.add(StrandMedia(strand_id=strand_id, media_id=media_id, display_order=position))


def register_media(db: Session, principal: Principal, payload: dict[str, Any]) -> Media:
    """Record a file the upload pipeline has already stored."""
    media = Media(user_id=principal.user_id, **payload)
    db.add(media)
    db.commit()
    db.refresh(media)
    logger.info("Registered %s media %s for user %s", media.media_type.value, media.media_id, principal.user_id)
    return media


def create_strand(
    db: Session,
    principal: Principal,
    content: Optional[str],
    group_ids: Iterable[str],
    media_ids: Iterable[str] = (),
) -> dict[str, Any]:
    """Create a strand and share it to ``group_ids`` in one transaction.

    Media are attached in the order given.
    """
    content = _clean_content(content)
    group_ids = _unique(group_ids)
    media_ids = _unique(media_ids)

    if not content and not media_ids:
        raise ValidationError("Either content or media (or both) is required")
    if not group_ids:
        raise ValidationError("At least one group is required")

    member_of = {
        group_id
        for (group_id,) in db.query(GroupMember.group_id)
        .filter(GroupMember.user_id == principal.user_id, GroupMember.group_id.in_(group_ids))
        .all()
    }
    if len(member_of) != len(group_ids):
        raise Forbidden("You are not a member of one or more specified groups")
    _owned_media(db, principal.user_id, media_ids)

    strand = Strand(user_id=principal.user_id, content=content)
    db.add(strand)
    db.flush()
    _link_media(db, strand.strand_id, media_ids)
    share_to_groups(db, strand.strand_id, group_ids)
    db.commit()
    db.refresh(strand)
    logger.info("Strand %s created by %s and shared to %d group(s)", strand.strand_id, principal.user_id, len(group_ids))
    return serialize_strands(db, principal, [strand], with_groups=True)[0]


def get_strand(db: Session, principal: Principal, strand_id: str) -> dict[str, Any]:
    strand = require_access(db, principal, strand_id)
    return serialize_strands(db, principal, [strand], with_groups=True)[0]


def _require_author(principal: Principal, strand: Strand) -> None:
    if strand.user_id != principal.user_id and not principal.is_admin:
        raise Forbidden()


def update_strand(
    db: Session,
    principal: Principal,
    strand_id: str,
    content: Optional[str] = None,
    media_ids: Optional[Iterable[str]] = None,
) -> dict[str, Any]:
    """Edit content and/or replace the media list.

    ``None`` leaves a field unchanged; an empty string clears the content and
    an empty list removes all media.
    """
    strand = require_access(db, principal, strand_id)
    _require_author(principal, strand)

    new_content = strand.content if content is None else _clean_content(content)
    if media_ids is None:
        new_media = [link.media_id for link in strand.media_links]
    else:
        new_media = _owned_media(db, strand.user_id, _unique(media_ids))
    if not new_content and not new_media:
        raise ValidationError("Strand must have either content or media")

    strand.content = new_content
    if media_ids is not None:
        strand.media_links.clear()
        db.flush()
        _link_media(db, strand.strand_id, new_media)
    strand.edited_at = utcnow()
    db.commit()
    db.refresh(strand)
    logger.info("Strand %s edited by %s", strand_id, principal.user_id)
    return serialize_strands(db, principal, [strand], with_groups=True)[0]


def delete_strand(db: Session, principal: Principal, strand_id: str) -> None:
    strand = require_access(db, principal, strand_id)
    _require_author(principal, strand)
    db.delete(strand)
    db.commit()
    logger.info("Strand %s deleted by %s", strand_id, principal.user_id)
