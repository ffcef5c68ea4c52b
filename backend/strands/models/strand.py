"""Strand ORM models: the post itself plus its media, shares, pins and fires."""
import uuid
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from strands.database import Base, utcnow


class Strand(Base):
    __tablename__ = "strands"

    strand_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    edited_at = Column(DateTime(timezone=True), nullable=True)

    author = relationship("User", lazy="joined")
    media_links = relationship(
        "StrandMedia",
        cascade="all, delete-orphan",
        order_by="StrandMedia.display_order",
    )
    shares = relationship("StrandShare", cascade="all, delete-orphan")
    pins = relationship("StrandPin", cascade="all, delete-orphan")
    fires = relationship("StrandFire", cascade="all, delete-orphan")
    comments = relationship("StrandComment", cascade="all, delete-orphan")


class StrandMedia(Base):
    __tablename__ = "strand_media"

    strand_id = Column(String(36), ForeignKey("strands.strand_id", ondelete="CASCADE"), primary_key=True)
    media_id = Column(String(36), ForeignKey("media.media_id", ondelete="CASCADE"), primary_key=True)
    display_order = Column(Integer, nullable=False, default=0)

    media = relationship("Media", lazy="joined")


class StrandShare(Base):
    __tablename__ = "strand_group_shares"

    strand_id = Column(String(36), ForeignKey("strands.strand_id", ondelete="CASCADE"), primary_key=True)
    group_id = Column(String(36), ForeignKey("groups.group_id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class StrandPin(Base):
    __tablename__ = "strand_pins"

    strand_id = Column(String(36), ForeignKey("strands.strand_id", ondelete="CASCADE"), primary_key=True)
    group_id = Column(String(36), ForeignKey("groups.group_id", ondelete="CASCADE"), primary_key=True, index=True)
    pinned_by = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    pinned_at = Column(DateTime(timezone=True), default=utcnow, index=True)


class StrandFire(Base):
    __tablename__ = "strand_fires"

    strand_id = Column(String(36), ForeignKey("strands.strand_id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
