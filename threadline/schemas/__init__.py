"""Convenience exports for schema layer."""
from .activity import ActivityItem, ActivityResponse
from .communities import (
    CommunityCreate,
    CommunityDetailResponse,
    CommunityResponse,
    CommunitySearchResponse,
    CommunityUpdate,
    MembershipResponse,
)
from .threads import (
    ReplyCreate,
    ThreadCreate,
    ThreadEngagementResponse,
    ThreadFeedResponse,
    ThreadListResponse,
    ThreadResponse,
    UserThreadsResponse,
)
from .users import (
    AuthorSummary,
    CommunityBrief,
    SortOrder,
    SuggestedUser,
    SuggestedUsersResponse,
    UserProfileResponse,
    UserResponse,
    UserSearchResponse,
    UserUpdateRequest,
)
from .webhooks import IdentityEvent, WebhookAck

__all__ = [
    "ActivityItem",
    "ActivityResponse",
    "AuthorSummary",
    "CommunityBrief",
    "CommunityCreate",
    "CommunityDetailResponse",
    "CommunityResponse",
    "CommunitySearchResponse",
    "CommunityUpdate",
    "IdentityEvent",
    "MembershipResponse",
    "ReplyCreate",
    "SortOrder",
    "SuggestedUser",
    "SuggestedUsersResponse",
    "ThreadCreate",
    "ThreadEngagementResponse",
    "ThreadFeedResponse",
    "ThreadListResponse",
    "ThreadResponse",
    "UserProfileResponse",
    "UserResponse",
    "UserSearchResponse",
    "UserThreadsResponse",
    "UserUpdateRequest",
    "WebhookAck",
]
