"""Group management API routes: roster, roles, invites, read state and the group feed."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from strands.database import get_db
from strands.dependencies import Principal, get_current_principal
from strands.models.group import GroupRole
from strands.schemas.group import (
    GroupCreate,
    GroupMemberAdd,
    GroupMemberOut,
    GroupMemberRoleUpdate,
    GroupOut,
    GroupSummary,
    InviteJoinOut,
    InviteOut,
    InvitePreview,
    MembersAdded,
)
from strands.schemas.strand import FeedOut
from strands.services import feed_service, group_service, invite_service

router = APIRouter()


@router.post("/", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(payload: GroupCreate, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    """Create a new group. Creator is automatically added as admin."""
    return group_service.create_group(db, principal.user_id, payload.name, payload.member_ids)


@router.get("/", response_model=list[GroupSummary])
def list_groups(db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    """Groups the caller belongs to, with role and last-read time."""
    return group_service.list_groups(db, principal.user_id)


@router.get("/invite/{token}", response_model=InvitePreview)
def preview_invite(token: str, db: Session = Depends(get_db)):
    """Public: which group an invite link leads to."""
    return invite_service.preview_invite(db, token)


@router.post("/invite/{token}/join", response_model=InviteJoinOut)
def join_via_invite(token: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return invite_service.redeem_invite(db, principal.user_id, token)


@router.get("/{group_id}", response_model=GroupOut)
def get_group(group_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    """Fetch a single group with members."""
    return group_service.get_group(db, principal, group_id)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(group_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    group_service.delete_group(db, principal.user_id, group_id)


@router.post("/{group_id}/members", response_model=MembersAdded, status_code=status.HTTP_201_CREATED)
def add_members(
    group_id: str,
    payload: GroupMemberAdd,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Add accepted friends of the caller to the group."""
    added = group_service.add_members(db, principal.user_id, group_id, payload.user_ids)
    return {"message": f"Added {len(added)} member(s)", "added": added}


@router.delete("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    group_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Remove a member from a group. Admins remove anyone; members only themselves."""
    group_service.remove_member(db, principal.user_id, group_id, user_id)


@router.patch("/{group_id}/members/{user_id}", response_model=GroupMemberOut)
def set_member_role(
    group_id: str,
    user_id: str,
    payload: GroupMemberRoleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return group_service.set_member_role(db, principal.user_id, group_id, user_id, GroupRole(payload.role))


@router.post("/{group_id}/leave")
def leave_group(group_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    group_service.leave_group(db, principal.user_id, group_id)
    return {"message": "Left group successfully"}


@router.post("/{group_id}/invite", response_model=InviteOut, status_code=status.HTTP_201_CREATED)
def create_invite(group_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    """Issue a 30-day, multi-use invite link."""
    return invite_service.issue_invite(db, principal.user_id, group_id)


@router.post("/{group_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_read(group_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    group_service.mark_group_read(db, principal, group_id)


@router.get("/{group_id}/strands", response_model=FeedOut)
def group_feed(
    group_id: str,
    limit: int = Query(feed_service.DEFAULT_LIMIT),
    offset: int = Query(0),
    pinned: bool = Query(False),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Strands shared to the group, pinned first (or only pinned with ``pinned=true``)."""
    return feed_service.get_group_feed(db, principal, group_id, limit=limit, offset=offset, pinned_only=pinned)
