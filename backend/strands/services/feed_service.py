"""Feed composition: group feeds and the cross-group user feed.

Pagination is offset-based and ``has_more`` is the heuristic
``len(page) == limit``; callers tolerate skew when strands arrive between
pages. Fire counts and pin state are read from rows on every request.
"""
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session, selectinload

from strands.dependencies import Principal
from strands.models.group import Group, GroupMember
from strands.models.strand import Strand, StrandFire, StrandPin, StrandShare
from strands.services.group_service import require_group_visible
from strands.services.visibility_service import visible_strand_ids

DEFAULT_LIMIT = 20
MAX_LIMIT = 50


def clamp_limit(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def fire_counts(db: Session, strand_ids: list[str]) -> dict[str, int]:
    if not strand_ids:
        return {}
    rows = (
        db.query(StrandFire.strand_id, func.count())
        .filter(StrandFire.strand_id.in_(strand_ids))
        .group_by(StrandFire.strand_id)
        .all()
    )
    return dict(rows)


def fired_by(db: Session, strand_ids: list[str], user_id: str) -> set[str]:
    if not strand_ids:
        return set()
    rows = (
        db.query(StrandFire.strand_id)
        .filter(StrandFire.strand_id.in_(strand_ids), StrandFire.user_id == user_id)
        .all()
    )
    return {strand_id for (strand_id,) in rows}


def shared_groups(db: Session, principal: Principal, strand_ids: list[str]) -> dict[str, list[dict[str, Any]]]:
    """Groups each strand is shared to, limited to groups the principal can see."""
    if not strand_ids:
        return {}
    query = (
        db.query(StrandShare.strand_id, Group.group_id, Group.name, StrandPin.pinned_at, GroupMember.role)
        .join(Group, Group.group_id == StrandShare.group_id)
        .outerjoin(
            StrandPin,
            (StrandPin.strand_id == StrandShare.strand_id) & (StrandPin.group_id == StrandShare.group_id),
        )
        .outerjoin(
            GroupMember,
            (GroupMember.group_id == StrandShare.group_id) & (GroupMember.user_id == principal.user_id),
        )
        .filter(StrandShare.strand_id.in_(strand_ids))
    )
    if not principal.is_admin:
        query = query.filter(GroupMember.user_id.isnot(None))

    groups: dict[str, list[dict[str, Any]]] = {}
    for strand_id, group_id, name, pinned_at, role in query.order_by(Group.name).all():
        groups.setdefault(strand_id, []).append({
            "group_id": group_id,
            "name": name,
            "is_pinned": pinned_at is not None,
            "user_role": role.value if role else None,
        })
    return groups


def _media(strand: Strand) -> list[dict[str, Any]]:
    items = []
    for link in strand.media_links:
        media = link.media
        items.append({
            "media_id": media.media_id,
            "display_order": link.display_order,
            "media_url": media.media_url,
            "thumbnail_url": media.thumbnail_url or media.media_url,
            "file_name": media.file_name,
            "file_size": media.file_size,
            "mime_type": media.mime_type,
            "media_type": media.media_type.value,
            "duration": media.duration,
            "width": media.width,
            "height": media.height,
        })
    return items


def serialize_strands(
    db: Session,
    principal: Principal,
    strands: list[Strand],
    pinned_at: Optional[dict[str, Optional[datetime]]] = None,
    with_groups: bool = False,
) -> list[dict[str, Any]]:
    """Annotate strands with author, ordered media, fires and pin state.

    ``pinned_at`` carries the pin state for a single group feed; ``with_groups``
    attaches per-group share and pin info instead.
    """
    ids = [s.strand_id for s in strands]
    counts = fire_counts(db, ids)
    fired = fired_by(db, ids, principal.user_id)
    groups = shared_groups(db, principal, ids) if with_groups else {}

    items = []
    for strand in strands:
        item = {
            "strand_id": strand.strand_id,
            "user_id": strand.user_id,
            "content": strand.content,
            "created_at": strand.created_at,
            "updated_at": strand.updated_at,
            "edited_at": strand.edited_at,
            "author": strand.author,
            "media": _media(strand),
            "fire_count": counts.get(strand.strand_id, 0),
            "has_user_fired": strand.strand_id in fired,
        }
        if pinned_at is not None:
            item["pinned_at"] = pinned_at.get(strand.strand_id)
            item["is_pinned"] = item["pinned_at"] is not None
        if with_groups:
            item["groups"] = groups.get(strand.strand_id, [])
        items.append(item)
    return items


def _page(items: list[dict[str, Any]], limit: int, offset: int) -> dict[str, Any]:
    return {
        "strands": items,
        "pagination": {"limit": limit, "offset": offset, "has_more": len(items) == limit},
    }


def get_group_feed(
    db: Session,
    principal: Principal,
    group_id: str,
    limit: Optional[int] = DEFAULT_LIMIT,
    offset: int = 0,
    pinned_only: bool = False,
) -> dict[str, Any]:
    """Strands shared to ``group_id``.

    Default ordering puts pinned strands first, each partition newest first;
    ``pinned_only`` returns only pinned strands, most recently pinned first.
    """
    require_group_visible(db, principal, group_id)
    limit = clamp_limit(limit)
    offset = max(offset, 0)

    query = (
        db.query(Strand, StrandPin.pinned_at)
        .join(StrandShare, (StrandShare.strand_id == Strand.strand_id) & (StrandShare.group_id == group_id))
        .outerjoin(StrandPin, (StrandPin.strand_id == Strand.strand_id) & (StrandPin.group_id == group_id))
        .options(selectinload(Strand.media_links))
    )
    if pinned_only:
        query = query.filter(StrandPin.strand_id.isnot(None)).order_by(
            StrandPin.pinned_at.desc(), Strand.strand_id
        )
    else:
        is_pinned = case((StrandPin.strand_id.isnot(None), 1), else_=0)
        query = query.order_by(is_pinned.desc(), Strand.created_at.desc(), Strand.strand_id)

    rows = query.offset(offset).limit(limit).all()
    strands = [strand for strand, _ in rows]
    pins = {strand.strand_id: pinned for strand, pinned in rows}
    return _page(serialize_strands(db, principal, strands, pinned_at=pins), limit, offset)


def get_user_feed(db: Session, principal: Principal, limit: Optional[int] = DEFAULT_LIMIT, offset: int = 0) -> dict[str, Any]:
    """Every strand visible to the principal, de-duplicated across groups, newest first."""
    limit = clamp_limit(limit)
    offset = max(offset, 0)

    query = db.query(Strand).options(selectinload(Strand.media_links))
    if not principal.is_admin:
        query = query.filter(Strand.strand_id.in_(visible_strand_ids(principal.user_id)))
    strands = query.order_by(Strand.created_at.desc(), Strand.strand_id).offset(offset).limit(limit).all()
    return _page(serialize_strands(db, principal, strands, with_groups=True), limit, offset)
