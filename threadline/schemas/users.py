"""Schemas for user profiles, onboarding and search."""
from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuthorSummary(BaseModel):
    """Author display fields attached to threads and activity entries."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_id: str
    username: str
    name: str
    image: str | None = None


class UserUpdateRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=150)
    name: str = Field(..., min_length=1, max_length=150)
    bio: str | None = Field(default=None, max_length=1000)
    image: str | None = Field(default=None, max_length=1024)

    @field_validator("username")
    def normalize_username(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_id: str
    username: str
    name: str
    bio: str | None = None
    image: str | None = None
    onboarded: bool
    created_at: datetime


class CommunityBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_id: str
    name: str
    username: str
    image: str | None = None


class UserProfileResponse(UserResponse):
    """Profile header data plus the references the profile tabs need."""

    communities: list[CommunityBrief] = Field(default_factory=list)
    thread_ids: list[UUID] = Field(default_factory=list)
    saved_thread_ids: list[UUID] = Field(default_factory=list)


class UserSearchResponse(BaseModel):
    users: list[UserResponse]
    is_next: bool
    total: int
    page_number: int
    page_size: int


class SuggestedUser(UserResponse):
    thread_ids: list[UUID] = Field(default_factory=list)


class SuggestedUsersResponse(BaseModel):
    users: list[SuggestedUser]


SortOrder = Literal["asc", "desc"]


__all__ = [
    "AuthorSummary",
    "CommunityBrief",
    "SortOrder",
    "SuggestedUser",
    "SuggestedUsersResponse",
    "UserProfileResponse",
    "UserResponse",
    "UserSearchResponse",
    "UserUpdateRequest",
]
