"""Schemas for the activity tab."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from .users import AuthorSummary


class ActivityItem(BaseModel):
    """A reply another user left on one of the viewer's threads."""

    id: UUID
    parent_id: UUID
    text: str
    author: AuthorSummary
    created_at: datetime


class ActivityResponse(BaseModel):
    items: list[ActivityItem]


__all__ = ["ActivityItem", "ActivityResponse"]
