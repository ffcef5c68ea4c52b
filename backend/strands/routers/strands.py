"""Strand API routes: the user feed, authoring, pins, fires and comments."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from strands.database import get_db
from strands.dependencies import Principal, get_current_principal
from strands.schemas.strand import (
    CommentCreate,
    CommentOut,
    FeedOut,
    FireOut,
    PinOut,
    PinRequest,
    StrandCreate,
    StrandOut,
    StrandUpdate,
)
from strands.services import comment_service, feed_service, pin_service, strand_service
from strands.services.notification_service import Notifier, get_notifier

router = APIRouter()


@router.get("/", response_model=FeedOut)
def user_feed(
    limit: int = Query(feed_service.DEFAULT_LIMIT),
    offset: int = Query(0),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Every strand shared into the caller's groups, newest first."""
    return feed_service.get_user_feed(db, principal, limit=limit, offset=offset)


@router.post("/", response_model=StrandOut, status_code=status.HTTP_201_CREATED)
def create_strand(payload: StrandCreate, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return strand_service.create_strand(db, principal, payload.content, payload.group_ids, payload.media_ids)


@router.get("/{strand_id}", response_model=StrandOut)
def get_strand(strand_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return strand_service.get_strand(db, principal, strand_id)


@router.put("/{strand_id}", response_model=StrandOut)
def update_strand(
    strand_id: str,
    payload: StrandUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return strand_service.update_strand(db, principal, strand_id, payload.content, payload.media_ids)


@router.delete("/{strand_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_strand(strand_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    strand_service.delete_strand(db, principal, strand_id)


@router.post("/{strand_id}/pin", response_model=PinOut)
def pin_strand(
    strand_id: str,
    payload: PinRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return pin_service.pin_strand(db, principal, strand_id, payload.group_id)


@router.delete("/{strand_id}/pin", status_code=status.HTTP_204_NO_CONTENT)
def unpin_strand(
    strand_id: str,
    payload: PinRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    pin_service.unpin_strand(db, principal, strand_id, payload.group_id)


@router.post("/{strand_id}/fire", response_model=FireOut)
def add_fire(strand_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return pin_service.toggle_fire(db, principal, strand_id, add=True)


@router.delete("/{strand_id}/fire", response_model=FireOut)
def remove_fire(strand_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return pin_service.toggle_fire(db, principal, strand_id, add=False)


@router.get("/{strand_id}/comments", response_model=list[CommentOut])
def list_comments(
    strand_id: str,
    group_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return comment_service.list_comments(db, principal, strand_id, group_id)


@router.post("/{strand_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def create_comment(
    strand_id: str,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    notifier: Notifier = Depends(get_notifier),
):
    return comment_service.create_comment(db, principal, strand_id, payload.content, notifier, payload.group_id)


@router.delete("/{strand_id}/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    strand_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    comment_service.delete_comment(db, principal, strand_id, comment_id)
