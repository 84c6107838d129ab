"""SQLAlchemy ORM model for threads and their replies."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from threadline.database import Base
from .associations import saved_threads, thread_likes


class Thread(Base):
    __tablename__ = "threads"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    author_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    parent_id = Column(UUID(as_uuid=True), ForeignKey("threads.id", ondelete="CASCADE"), nullable=True, index=True)
    community_id = Column(
        UUID(as_uuid=True),
        ForeignKey("communities.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    author = relationship("User", back_populates="threads")
    community = relationship("Community", back_populates="threads")
    parent = relationship("Thread", remote_side=[id], back_populates="children")
    children = relationship("Thread", back_populates="parent", order_by="Thread.created_at.asc()")
    likes = relationship("User", secondary=thread_likes, back_populates="liked")
    saved_by = relationship("User", secondary=saved_threads, back_populates="saved")


__all__ = ["Thread"]
