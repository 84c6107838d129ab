"""Thread, reply, like and save routes."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_session
from ..models import Thread, User
from ..schemas import (
    ReplyCreate,
    ThreadCreate,
    ThreadEngagementResponse,
    ThreadFeedResponse,
    ThreadResponse,
)
from ..services import (
    add_reply,
    create_thread,
    fetch_thread_by_id,
    fetch_threads,
    get_current_user,
    get_optional_user,
    saved_thread_ids,
    serialize_thread,
    set_like_state,
    set_saved_state,
    toggle_like,
    toggle_save,
)

router = APIRouter(prefix="/threads", tags=["threads"])


def _card(db: Session, thread: Thread, viewer: User | None, *, depth: int = 1) -> ThreadResponse:
    viewer_id = cast(UUID, viewer.id) if viewer else None
    saved = saved_thread_ids(db, viewer_id)
    return ThreadResponse(**serialize_thread(thread, viewer_id=viewer_id, saved_ids=saved, depth=depth))


@router.post("/", response_model=ThreadResponse, status_code=status.HTTP_201_CREATED)
async def create_thread_endpoint(
    payload: ThreadCreate,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ThreadResponse:
    thread = create_thread(db, author=current_user, text=payload.text, community_external_id=payload.community_id)
    return _card(db, fetch_thread_by_id(db, thread_id=cast(UUID, thread.id)), current_user)


@router.get("/feed", response_model=ThreadFeedResponse)
async def feed_endpoint(
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1, le=100),
    db: Session = Depends(get_session),
    current_user: User | None = Depends(get_optional_user),
) -> ThreadFeedResponse:
    result = fetch_threads(db, page_number=page, page_size=page_size or get_settings().default_page_size)
    viewer_id = cast(UUID, current_user.id) if current_user else None
    saved = saved_thread_ids(db, viewer_id)
    return ThreadFeedResponse(
        threads=[
            ThreadResponse(**serialize_thread(thread, viewer_id=viewer_id, saved_ids=saved)) for thread in result.items
        ],
        is_next=result.is_next,
    )


@router.get("/{thread_id}", response_model=ThreadResponse)
async def thread_detail_endpoint(
    thread_id: UUID,
    db: Session = Depends(get_session),
    current_user: User | None = Depends(get_optional_user),
) -> ThreadResponse:
    return _card(db, fetch_thread_by_id(db, thread_id=thread_id), current_user, depth=2)


@router.post("/{thread_id}/replies", response_model=ThreadResponse, status_code=status.HTTP_201_CREATED)
async def reply_endpoint(
    thread_id: UUID,
    payload: ReplyCreate,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ThreadResponse:
    reply = add_reply(db, thread_id=thread_id, author=current_user, text=payload.text)
    return _card(db, fetch_thread_by_id(db, thread_id=cast(UUID, reply.id)), current_user)


@router.post("/{thread_id}/likes", response_model=ThreadEngagementResponse)
async def like_endpoint(
    thread_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ThreadEngagementResponse:
    payload = set_like_state(db, thread_id=thread_id, user_id=current_user.id, should_like=True)
    return ThreadEngagementResponse(**payload)


@router.delete("/{thread_id}/likes", response_model=ThreadEngagementResponse)
async def unlike_endpoint(
    thread_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ThreadEngagementResponse:
    payload = set_like_state(db, thread_id=thread_id, user_id=current_user.id, should_like=False)
    return ThreadEngagementResponse(**payload)


@router.post("/{thread_id}/likes/toggle", response_model=ThreadEngagementResponse)
async def toggle_like_endpoint(
    thread_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ThreadEngagementResponse:
    return ThreadEngagementResponse(**toggle_like(db, thread_id=thread_id, user_id=current_user.id))


@router.post("/{thread_id}/saves", response_model=ThreadEngagementResponse)
async def save_endpoint(
    thread_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ThreadEngagementResponse:
    payload = set_saved_state(db, thread_id=thread_id, user_id=current_user.id, should_save=True)
    return ThreadEngagementResponse(**payload)


@router.delete("/{thread_id}/saves", response_model=ThreadEngagementResponse)
async def unsave_endpoint(
    thread_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ThreadEngagementResponse:
    payload = set_saved_state(db, thread_id=thread_id, user_id=current_user.id, should_save=False)
    return ThreadEngagementResponse(**payload)


@router.post("/{thread_id}/saves/toggle", response_model=ThreadEngagementResponse)
async def toggle_save_endpoint(
    thread_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ThreadEngagementResponse:
    return ThreadEngagementResponse(**toggle_save(db, thread_id=thread_id, user_id=current_user.id))
