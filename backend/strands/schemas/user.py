"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    display_name: Optional[str] = Field(default=None, max_length=100)
    profile_picture_url: Optional[str] = Field(default=None, max_length=1000)


class UserUpdate(BaseModel):
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    profile_picture_url: Optional[str] = Field(default=None, max_length=1000)


class UserBrief(BaseModel):
    user_id: str
    username: str
    display_name: str
    profile_picture_url: Optional[str] = None

    model_config = {"from_attributes": True}


class UserOut(UserBrief):
    is_admin: bool
    created_at: datetime
