"""Pydantic schemas for friendships."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel

from strands.schemas.user import UserBrief


class FriendRequestCreate(BaseModel):
    user_id: str


class FriendRequestRespond(BaseModel):
    status: Literal["accepted", "declined"]


class FriendshipOut(BaseModel):
    friendship_id: str
    user_a_id: str
    user_b_id: str
    requested_by: str
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RelationshipOut(BaseModel):
    friendship_id: str
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    user: UserBrief
    is_requester: bool
    is_received: bool
