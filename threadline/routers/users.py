"""User profile, onboarding, search and activity routes."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_session
from ..models import User
from ..schemas import (
    ActivityItem,
    ActivityResponse,
    AuthorSummary,
    SortOrder,
    SuggestedUser,
    SuggestedUsersResponse,
    ThreadListResponse,
    ThreadResponse,
    UserProfileResponse,
    UserResponse,
    UserSearchResponse,
    UserThreadsResponse,
    UserUpdateRequest,
)
from ..services import (
    fetch_suggested_users,
    fetch_user,
    fetch_user_posts,
    fetch_user_replies,
    fetch_user_saved,
    fetch_users,
    get_activity,
    get_current_identity,
    get_current_user,
    saved_thread_ids,
    serialize_thread,
    update_user,
)

router = APIRouter(prefix="/users", tags=["users"])


def _profile_response(user: User) -> UserProfileResponse:
    response = UserProfileResponse.model_validate(user)
    response.thread_ids = [thread.id for thread in user.threads if thread.parent_id is None]
    response.saved_thread_ids = [thread.id for thread in user.saved]
    return response


def _thread_list(db: Session, threads, viewer: User) -> ThreadListResponse:
    viewer_id = cast(UUID, viewer.id)
    saved = saved_thread_ids(db, viewer_id)
    return ThreadListResponse(
        threads=[ThreadResponse(**serialize_thread(thread, viewer_id=viewer_id, saved_ids=saved)) for thread in threads]
    )


@router.get("/me", response_model=UserProfileResponse)
async def read_my_profile(
    external_id: str = Depends(get_current_identity),
    db: Session = Depends(get_session),
) -> UserProfileResponse:
    return _profile_response(fetch_user(db, external_id))


@router.put("/me", response_model=UserResponse)
async def update_my_profile(
    payload: UserUpdateRequest,
    external_id: str = Depends(get_current_identity),
    db: Session = Depends(get_session),
) -> UserResponse:
    """Complete onboarding or edit the signed-in user's profile."""

    user = update_user(
        db,
        external_id=external_id,
        username=payload.username,
        name=payload.name,
        bio=payload.bio,
        image=payload.image,
    )
    return UserResponse.model_validate(user)


@router.get("/search", response_model=UserSearchResponse)
async def search_users(
    q: str = Query(default="", max_length=150),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1, le=100),
    sort: SortOrder = Query(default="desc"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> UserSearchResponse:
    size = page_size or get_settings().default_page_size
    result = fetch_users(
        db,
        requester_external_id=current_user.external_id,
        search=q,
        page_number=page,
        page_size=size,
        sort=sort,
    )
    return UserSearchResponse(
        users=[UserResponse.model_validate(user) for user in result.items],
        is_next=result.is_next,
        total=result.total,
        page_number=result.page_number,
        page_size=result.page_size,
    )


@router.get("/suggested", response_model=SuggestedUsersResponse)
async def suggested_users(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> SuggestedUsersResponse:
    users = fetch_suggested_users(
        db,
        requester_external_id=current_user.external_id,
        limit=get_settings().suggested_users_limit,
    )
    items = []
    for user in users:
        item = SuggestedUser.model_validate(user)
        item.thread_ids = [thread.id for thread in user.threads]
        items.append(item)
    return SuggestedUsersResponse(users=items)


@router.get("/me/activity", response_model=ActivityResponse)
async def my_activity(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ActivityResponse:
    replies = get_activity(db, cast(UUID, current_user.id))
    return ActivityResponse(
        items=[
            ActivityItem(
                id=reply.id,
                parent_id=reply.parent_id,
                text=reply.text,
                author=AuthorSummary.model_validate(reply.author),
                created_at=reply.created_at,
            )
            for reply in replies
        ]
    )


@router.get("/{external_id}", response_model=UserProfileResponse)
async def read_profile(
    external_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> UserProfileResponse:
    return _profile_response(fetch_user(db, external_id))


@router.get("/{external_id}/threads", response_model=UserThreadsResponse)
async def user_threads(
    external_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> UserThreadsResponse:
    owner, threads = fetch_user_posts(db, external_id)
    viewer_id = cast(UUID, current_user.id)
    saved = saved_thread_ids(db, viewer_id)
    return UserThreadsResponse(
        user_id=owner.id,
        threads=[ThreadResponse(**serialize_thread(thread, viewer_id=viewer_id, saved_ids=saved)) for thread in threads],
        saved_thread_ids=sorted(saved_thread_ids(db, cast(UUID, owner.id)), key=str),
    )


@router.get("/{external_id}/replies", response_model=ThreadListResponse)
async def user_replies(
    external_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ThreadListResponse:
    return _thread_list(db, fetch_user_replies(db, external_id), current_user)


@router.get("/{external_id}/saved", response_model=ThreadListResponse)
async def user_saved(
    external_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ThreadListResponse:
    return _thread_list(db, fetch_user_saved(db, external_id), current_user)
