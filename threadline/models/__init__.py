"""Convenience exports for ORM models."""
from .associations import community_members, saved_threads, thread_likes
from .community import Community
from .thread import Thread
from .user import User

__all__ = [
    "community_members",
    "saved_threads",
    "thread_likes",
    "Community",
    "Thread",
    "User",
]
