"""Friendship API routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from strands.database import get_db
from strands.dependencies import Principal, get_current_principal
from strands.models.friendship import FriendshipStatus
from strands.schemas.friend import FriendRequestCreate, FriendRequestRespond, FriendshipOut, RelationshipOut
from strands.services import friendship_service
from strands.services.notification_service import Notifier, get_notifier

router = APIRouter()


@router.get("/", response_model=list[RelationshipOut])
def list_friends(db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    """Accepted friends of the caller."""
    return friendship_service.list_relationships(db, principal.user_id, FriendshipStatus.accepted)


@router.get("/requests", response_model=list[RelationshipOut])
def list_requests(db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    """Pending requests, both sent and received."""
    return friendship_service.list_relationships(db, principal.user_id, FriendshipStatus.pending)


@router.get("/relationships", response_model=list[RelationshipOut])
def list_relationships(db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return friendship_service.list_relationships(db, principal.user_id)


@router.post("/requests", response_model=FriendshipOut, status_code=status.HTTP_201_CREATED)
def send_request(
    payload: FriendRequestCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    notifier: Notifier = Depends(get_notifier),
):
    return friendship_service.request_friendship(db, principal.user_id, payload.user_id, notifier)


@router.put("/requests/{request_id}", response_model=FriendshipOut)
def respond_to_request(
    request_id: str,
    payload: FriendRequestRespond,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    notifier: Notifier = Depends(get_notifier),
):
    return friendship_service.respond_to_request(db, principal.user_id, request_id, payload.status, notifier)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_friend(user_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    friendship_service.remove_friendship(db, principal.user_id, user_id)
