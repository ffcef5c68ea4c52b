"""Request-scoped dependencies: the authenticated principal.

Authentication happens upstream; the proxy forwards the verified user id in
the ``X-User-Id`` header. The administrator flag is always read fresh from the
database, never trusted from the request.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from strands.database import get_db
from strands.errors import Unauthenticated
from strands.models.user import User


@dataclass(frozen=True)
class Principal:
    user_id: str
    is_admin: bool = False


def get_current_principal(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> Principal:
    if not x_user_id:
        raise Unauthenticated()
    user = db.query(User).filter(User.user_id == x_user_id).first()
    if not user:
        raise Unauthenticated("Invalid or unknown user")
    return Principal(user_id=user.user_id, is_admin=bool(user.is_admin))
