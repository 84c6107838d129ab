"""SQLAlchemy ORM model for application users."""
from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from threadline.database import Base
from .associations import community_members, saved_threads, thread_likes
from .base import TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_id = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(150), unique=True, nullable=False, index=True)
    name = Column(String(150), nullable=False, default="")
    bio = Column(Text, nullable=True)
    image = Column(String(1024), nullable=True)
    onboarded = Column(Boolean, nullable=False, server_default=expression.false(), default=False)

    threads = relationship("Thread", back_populates="author", order_by="Thread.created_at.desc()")
    communities = relationship("Community", secondary=community_members, back_populates="members")
    saved = relationship("Thread", secondary=saved_threads, back_populates="saved_by")
    liked = relationship("Thread", secondary=thread_likes, back_populates="likes")
    created_communities = relationship("Community", back_populates="created_by")


__all__ = ["User"]
