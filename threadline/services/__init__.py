"""Convenience exports for service layer."""
from .auth_service import (
    decode_identity_token,
    get_current_identity,
    get_current_user,
    get_optional_user,
    verify_webhook_signature,
)
from .community_service import (
    add_member,
    count_community_threads,
    create_community,
    fetch_communities,
    fetch_community_details,
    fetch_community_threads,
    remove_member,
    update_community_info,
)
from .errors import DataAccessError
from .identity_events import handle_identity_event, sync_identity_user
from .pagination import Page, has_next_page, paginate
from .thread_service import (
    add_reply,
    create_thread,
    engagement_snapshot,
    fetch_thread_by_id,
    fetch_threads,
    saved_thread_ids,
    serialize_thread,
    set_like_state,
    set_saved_state,
    toggle_like,
    toggle_save,
)
from .user_service import (
    fetch_suggested_users,
    fetch_user,
    fetch_user_posts,
    fetch_user_replies,
    fetch_user_saved,
    fetch_users,
    get_activity,
    update_user,
)

__all__ = [
    "decode_identity_token",
    "get_current_identity",
    "get_current_user",
    "get_optional_user",
    "verify_webhook_signature",
    "add_member",
    "count_community_threads",
    "create_community",
    "fetch_communities",
    "fetch_community_details",
    "fetch_community_threads",
    "remove_member",
    "update_community_info",
    "DataAccessError",
    "handle_identity_event",
    "sync_identity_user",
    "Page",
    "has_next_page",
    "paginate",
    "add_reply",
    "create_thread",
    "engagement_snapshot",
    "fetch_thread_by_id",
    "fetch_threads",
    "saved_thread_ids",
    "serialize_thread",
    "set_like_state",
    "set_saved_state",
    "toggle_like",
    "toggle_save",
    "fetch_suggested_users",
    "fetch_user",
    "fetch_user_posts",
    "fetch_user_replies",
    "fetch_user_saved",
    "fetch_users",
    "get_activity",
    "update_user",
]
