"""Media reference ORM model.

Rows describe files already stored by the upload pipeline; bytes never pass
through this service.
"""
import uuid
import enum
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum as SAEnum
from strands.database import Base, utcnow


class MediaType(str, enum.Enum):
    image = "image"
    video = "video"
    audio = "audio"


class Media(Base):
    __tablename__ = "media"

    media_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    media_url = Column(String(2000), nullable=False)
    thumbnail_url = Column(String(2000), nullable=True)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(50), nullable=False)
    media_type = Column(SAEnum(MediaType), nullable=False, default=MediaType.image)
    duration = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
