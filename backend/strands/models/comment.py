"""StrandComment ORM model."""
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from strands.database import Base, utcnow


class StrandComment(Base):
    __tablename__ = "strand_comments"

    comment_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    strand_id = Column(String(36), ForeignKey("strands.strand_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    # NULL means the comment is visible in every group the strand is shared to
    group_id = Column(String(36), ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=True, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    author = relationship("User", lazy="joined")
