"""Friendship ORM model.

One row per unordered pair: ``user_a_id < user_b_id`` under a unique
constraint, with the requester kept in ``requested_by``.
"""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Enum as SAEnum
from strands.database import Base, utcnow


class FriendshipStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    blocked = "blocked"


def ordered_pair(first: str, second: str) -> tuple[str, str]:
    return (first, second) if first < second else (second, first)


class Friendship(Base):
    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("user_a_id", "user_b_id", name="uq_friendships_pair"),
        CheckConstraint("user_a_id < user_b_id", name="ck_friendships_ordered"),
    )

    friendship_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_a_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    user_b_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    requested_by = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    status = Column(SAEnum(FriendshipStatus), nullable=False, default=FriendshipStatus.pending)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def recipient_id(self) -> str:
        return self.user_b_id if self.requested_by == self.user_a_id else self.user_a_id

    def counterpart_of(self, user_id: str) -> str:
        return self.user_b_id if user_id == self.user_a_id else self.user_a_id
