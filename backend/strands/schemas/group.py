"""Pydantic schemas for Groups, memberships and invites."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from strands.schemas.user import UserBrief


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    member_ids: list[str] = []

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Group name cannot be blank")
        return value


class GroupMemberAdd(BaseModel):
    user_ids: list[str] = Field(min_length=1)


class GroupMemberRoleUpdate(BaseModel):
    role: Literal["admin", "member"]


class GroupMemberOut(BaseModel):
    user_id: str
    role: str
    joined_at: datetime
    user: Optional[UserBrief] = None

    model_config = {"from_attributes": True}


class GroupOut(BaseModel):
    group_id: str
    name: str
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    members: list[GroupMemberOut] = []

    model_config = {"from_attributes": True}


class GroupSummary(BaseModel):
    group_id: str
    name: str
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    user_role: str
    joined_at: datetime
    last_read_at: Optional[datetime] = None


class MembersAdded(BaseModel):
    message: str
    added: list[str]


class InviteOut(BaseModel):
    invite_id: str
    token: str
    invite_url: str
    expires_at: datetime
    created_at: datetime


class InvitePreview(BaseModel):
    group_id: str
    group_name: str
    expires_at: datetime


class InviteJoinOut(BaseModel):
    message: str
    group_id: str
    already_member: bool
