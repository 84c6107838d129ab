"""Schemas for communities."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .users import UserResponse


class CommunityCreate(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=150)
    username: str = Field(..., min_length=1, max_length=150)
    image: str | None = None
    bio: str | None = None


class CommunityUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    username: str | None = Field(default=None, min_length=1, max_length=150)
    image: str | None = None


class CommunityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_id: str
    name: str
    username: str
    image: str | None = None
    bio: str | None = None
    created_at: datetime


class CommunityDetailResponse(CommunityResponse):
    created_by: UserResponse | None = None
    members: list[UserResponse] = Field(default_factory=list)
    thread_count: int = 0


class CommunitySearchResponse(BaseModel):
    communities: list[CommunityResponse]
    is_next: bool
    total: int
    page_number: int
    page_size: int


class MembershipResponse(BaseModel):
    community_id: UUID
    user_id: UUID
    member_count: int
    status: str


__all__ = [
    "CommunityCreate",
    "CommunityDetailResponse",
    "CommunityResponse",
    "CommunitySearchResponse",
    "CommunityUpdate",
    "MembershipResponse",
]
