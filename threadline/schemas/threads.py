"""Pydantic schemas for thread resources."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from ..constants import THREAD_TEXT_MAX_LENGTH
from .users import AuthorSummary, CommunityBrief


class ThreadCreate(BaseModel):
    """Payload used by API clients when posting a thread."""

    text: str = Field(..., min_length=1, max_length=THREAD_TEXT_MAX_LENGTH)
    community_id: str | None = Field(default=None, description="External id of the community to post into")


class ReplyCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=THREAD_TEXT_MAX_LENGTH)


class ThreadResponse(BaseModel):
    """Thread card record: everything a card needs to render itself."""

    id: UUID
    parent_id: UUID | None = None
    text: str
    author: AuthorSummary
    community: CommunityBrief | None = None
    created_at: datetime
    children: list["ThreadResponse"] = Field(default_factory=list)
    like_count: int = 0
    reply_count: int = 0
    viewer_has_liked: bool = False
    viewer_has_saved: bool = False


class ThreadFeedResponse(BaseModel):
    """Envelope used when returning a page of threads."""

    threads: list[ThreadResponse]
    is_next: bool = False


class ThreadListResponse(BaseModel):
    threads: list[ThreadResponse]


class ThreadEngagementResponse(BaseModel):
    """Like/save counters used by interactive UI."""

    thread_id: UUID
    like_count: int
    reply_count: int
    viewer_has_liked: bool
    viewer_has_saved: bool


class UserThreadsResponse(BaseModel):
    """A user's own threads plus their saved references for card decoration."""

    user_id: UUID
    threads: list[ThreadResponse]
    saved_thread_ids: list[UUID] = Field(default_factory=list)


ThreadResponse.model_rebuild()


__all__ = [
    "ReplyCreate",
    "ThreadCreate",
    "ThreadEngagementResponse",
    "ThreadFeedResponse",
    "ThreadListResponse",
    "ThreadResponse",
    "UserThreadsResponse",
]
