"""User API routes."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from strands.database import get_db
from strands.dependencies import Principal, get_current_principal
from strands.errors import Conflict, NotFound
from strands.models.user import User
from strands.schemas.user import UserBrief, UserCreate, UserOut, UserUpdate

logger = logging.getLogger(__name__)
router = APIRouter()

SEARCH_LIMIT = 20


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Register a user record for an identity the auth proxy has verified."""
    username = payload.username.strip()
    if db.query(User).filter(func.lower(User.username) == username.lower()).first():
        raise Conflict("Username already taken")
    user = User(
        username=username,
        display_name=payload.display_name or username,
        profile_picture_url=payload.profile_picture_url,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username already taken")
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.username)
    return user


@router.get("/search", response_model=list[UserBrief])
def search_users(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Case-insensitive username search, excluding the caller."""
    pattern = f"%{q.strip().lower()}%"
    return (
        db.query(User)
        .filter(func.lower(User.username).like(pattern), User.user_id != principal.user_id)
        .order_by(User.username)
        .limit(SEARCH_LIMIT)
        .all()
    )


@router.get("/me", response_model=UserOut)
def get_me(db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return db.query(User).filter(User.user_id == principal.user_id).one()


@router.patch("/me", response_model=UserOut)
def update_me(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Update the caller's profile (partial update)."""
    user = db.query(User).filter(User.user_id == principal.user_id).one()
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "display_name" and value is None:
            continue
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Updated profile of user %s", user.user_id)
    return user


@router.get("/{user_id}", response_model=UserBrief)
def get_user(user_id: str, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user
