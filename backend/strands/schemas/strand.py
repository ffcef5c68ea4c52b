"""Pydantic schemas for strands, media, pins, fires and comments."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from strands.schemas.user import UserBrief


class MediaCreate(BaseModel):
    media_url: str = Field(min_length=1, max_length=2000)
    thumbnail_url: Optional[str] = Field(default=None, max_length=2000)
    file_name: str = Field(min_length=1, max_length=255)
    file_size: int = Field(ge=0)
    mime_type: str = Field(min_length=1, max_length=50)
    media_type: Literal["image", "video", "audio"] = "image"
    duration: Optional[int] = Field(default=None, ge=0)
    width: Optional[int] = Field(default=None, ge=0)
    height: Optional[int] = Field(default=None, ge=0)


class MediaOut(BaseModel):
    media_id: str
    media_url: str
    thumbnail_url: Optional[str] = None
    file_name: str
    file_size: int
    mime_type: str
    media_type: str
    duration: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StrandMediaOut(MediaOut):
    display_order: int


class StrandCreate(BaseModel):
    content: Optional[str] = None
    group_ids: list[str] = Field(min_length=1)
    media_ids: list[str] = []


class StrandUpdate(BaseModel):
    content: Optional[str] = None
    media_ids: Optional[list[str]] = None


class StrandGroupOut(BaseModel):
    group_id: str
    name: str
    is_pinned: bool
    user_role: Optional[str] = None


class StrandOut(BaseModel):
    strand_id: str
    user_id: str
    content: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    edited_at: Optional[datetime] = None
    author: UserBrief
    media: list[StrandMediaOut] = []
    fire_count: int = 0
    has_user_fired: bool = False
    is_pinned: Optional[bool] = None
    pinned_at: Optional[datetime] = None
    groups: Optional[list[StrandGroupOut]] = None


class Pagination(BaseModel):
    limit: int
    offset: int
    has_more: bool


class FeedOut(BaseModel):
    strands: list[StrandOut]
    pagination: Pagination


class PinRequest(BaseModel):
    group_id: str


class PinOut(BaseModel):
    strand_id: str
    group_id: str
    pinned_by: str
    pinned_at: datetime


class FireOut(BaseModel):
    fire_count: int
    has_user_fired: bool


class CommentCreate(BaseModel):
    content: str
    group_id: Optional[str] = None


class CommentOut(BaseModel):
    comment_id: str
    strand_id: str
    user_id: str
    group_id: Optional[str] = None
    content: str
    created_at: datetime
    author: UserBrief

    model_config = {"from_attributes": True}
