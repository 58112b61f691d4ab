# gallery/models/account.py
import enum

from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship

from .base import Base


class AccountCategory(str, enum.Enum):
    LEAD = "lead"
    CUSTOMER = "customer"


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    secret = Column(String(255), nullable=False)  # stored as given
    category = Column(String(20), nullable=False, default=AccountCategory.LEAD.value)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    media = relationship(
        "MediaItem",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Account(id={self.id}, email={self.email})>"
