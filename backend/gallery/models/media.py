# gallery/models/media.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from .base import Base


class MediaItem(Base):
    __tablename__ = "media_items"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    filename = Column(String(255), nullable=True)
    payload = Column(Text, nullable=False)  # base64
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    owner_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    owner = relationship("Account", back_populates="media")

    def __repr__(self):
        return f"<MediaItem(id={self.id}, owner_id={self.owner_id}, title={self.title})>"
