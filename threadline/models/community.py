"""SQLAlchemy ORM model for communities."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from threadline.database import Base
from .associations import community_members
from .base import TimestampMixin


class Community(TimestampMixin, Base):
    __tablename__ = "communities"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_id = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(150), unique=True, nullable=False, index=True)
    name = Column(String(150), nullable=False)
    image = Column(String(1024), nullable=True)
    bio = Column(Text, nullable=True)
    created_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_by = relationship("User", back_populates="created_communities")
    members = relationship("User", secondary=community_members, back_populates="communities")
    threads = relationship("Thread", back_populates="community", order_by="Thread.created_at.desc()")


__all__ = ["Community"]
