"""Group, GroupMember, GroupInvite and GroupReadStatus ORM models."""
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from strands.database import Base, utcnow
import enum


class GroupRole(str, enum.Enum):
    admin = "admin"
    member = "member"


class Group(Base):
    __tablename__ = "groups"

    group_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    created_by = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")
    invites = relationship("GroupInvite", back_populates="group", cascade="all, delete-orphan")
    read_statuses = relationship("GroupReadStatus", cascade="all, delete-orphan")
    shares = relationship("StrandShare", cascade="all, delete-orphan")
    pins = relationship("StrandPin", cascade="all, delete-orphan")
    comments = relationship("StrandComment", cascade="all, delete-orphan")


class GroupMember(Base):
    __tablename__ = "group_members"

    group_id = Column(String(36), ForeignKey("groups.group_id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True, index=True)
    role = Column(SAEnum(GroupRole), nullable=False, default=GroupRole.member)
    joined_at = Column(DateTime(timezone=True), default=utcnow)

    group = relationship("Group", back_populates="members")
    user = relationship("User", lazy="joined")


class GroupInvite(Base):
    __tablename__ = "group_invites"

    invite_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    group_id = Column(String(36), ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(64), nullable=False, unique=True, index=True)
    created_by = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    group = relationship("Group", back_populates="invites")


class GroupReadStatus(Base):
    __tablename__ = "group_read_status"
    __table_args__ = (UniqueConstraint("user_id", "group_id", name="uq_group_read_status_user_group"),)

    read_status_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    group_id = Column(String(36), ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False, index=True)
    last_read_at = Column(DateTime(timezone=True), default=utcnow)
