"""Business logic for threads, replies, likes and saves."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session, selectinload

from ..models import Community, Thread, User, saved_threads, thread_likes
from .errors import storage_errors
from .pagination import Page, paginate

logger = logging.getLogger(__name__)


def card_loader_options() -> list[Any]:
    """Eager loads needed to render a thread card and its reply avatars."""

    return [
        selectinload(Thread.author),
        selectinload(Thread.community),
        selectinload(Thread.likes),
        selectinload(Thread.children).selectinload(Thread.author),
    ]


def _author_record(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "external_id": user.external_id,
        "username": user.username,
        "name": user.name,
        "image": user.image,
    }


def _community_record(community: Community | None) -> dict[str, Any] | None:
    if community is None:
        return None
    return {
        "id": community.id,
        "external_id": community.external_id,
        "name": community.name,
        "username": community.username,
        "image": community.image,
    }


def serialize_thread(
    thread: Thread,
    *,
    viewer_id: UUID | None = None,
    saved_ids: Iterable[UUID] = (),
    depth: int = 1,
) -> dict[str, Any]:
    """Flatten a thread into a card record, nesting replies ``depth`` levels deep."""

    saved = set(saved_ids)
    children = list(thread.children)
    return {
        "id": thread.id,
        "parent_id": thread.parent_id,
        "text": thread.text,
        "author": _author_record(thread.author),
        "community": _community_record(thread.community),
        "created_at": thread.created_at,
        "children": [
            serialize_thread(child, viewer_id=viewer_id, saved_ids=saved, depth=depth - 1) for child in children
        ]
        if depth > 0
        else [],
        "like_count": len(thread.likes),
        "reply_count": len(children),
        "viewer_has_liked": viewer_id is not None and any(user.id == viewer_id for user in thread.likes),
        "viewer_has_saved": thread.id in saved,
    }


def saved_thread_ids(db: Session, user_id: UUID | None) -> set[UUID]:
    """Return the ids in ``user_id``'s saved list (empty for anonymous viewers)."""

    if user_id is None:
        return set()
    stmt = select(saved_threads.c.thread_id).where(saved_threads.c.user_id == user_id)
    with storage_errors(db, "fetch saved thread ids", logger):
        return set(db.scalars(stmt))


def get_thread_or_404(db: Session, thread_id: UUID) -> Thread:
    with storage_errors(db, "look up thread", logger):
        thread = db.get(Thread, thread_id)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
    return thread


def _clean_text(text: str | None) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Thread text cannot be empty")
    return cleaned


def create_thread(
    db: Session,
    *,
    author: User,
    text: str,
    community_external_id: str | None = None,
) -> Thread:
    """Create a top-level thread, optionally posted into a community."""

    body = _clean_text(text)
    community: Community | None = None
    if community_external_id:
        with storage_errors(db, "look up community", logger):
            community = db.scalar(select(Community).where(Community.external_id == community_external_id))
        if community is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Community not found")

    thread = Thread(
        author_id=author.id,
        text=body,
        community_id=community.id if community else None,
        created_at=datetime.now(timezone.utc),
    )
    with storage_errors(db, "create thread", logger):
        db.add(thread)
        db.commit()
    db.refresh(thread)
    return thread


def add_reply(db: Session, *, thread_id: UUID, author: User, text: str) -> Thread:
    """Attach a reply to ``thread_id``; the reply's parent points back to it."""

    body = _clean_text(text)
    parent = get_thread_or_404(db, thread_id)
    reply = Thread(
        author_id=author.id,
        text=body,
        parent_id=parent.id,
        created_at=datetime.now(timezone.utc),
    )
    with storage_errors(db, "add reply", logger):
        db.add(reply)
        db.commit()
    db.refresh(reply)
    return reply


def fetch_threads(db: Session, *, page_number: int = 1, page_size: int = 20) -> Page[Thread]:
    """Return one page of top-level threads, newest first."""

    stmt = (
        select(Thread)
        .where(Thread.parent_id.is_(None))
        .order_by(Thread.created_at.desc(), Thread.id.desc())
        .execution_options(populate_existing=True)
    )
    with storage_errors(db, "fetch threads", logger):
        return paginate(db, stmt, page_number=page_number, page_size=page_size, options=card_loader_options())


def fetch_thread_by_id(db: Session, *, thread_id: UUID) -> Thread:
    """Return a thread with two levels of replies and their authors loaded."""

    stmt = (
        select(Thread)
        .where(Thread.id == thread_id)
        .execution_options(populate_existing=True)
        .options(
            selectinload(Thread.author),
            selectinload(Thread.community),
            selectinload(Thread.likes),
            selectinload(Thread.children).selectinload(Thread.author),
            selectinload(Thread.children).selectinload(Thread.children).selectinload(Thread.author),
        )
    )
    with storage_errors(db, "fetch thread", logger):
        thread = db.scalar(stmt)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
    return thread


def _has_pair(db: Session, table: Any, *, thread_id: UUID, user_id: UUID) -> bool:
    stmt = select(table.c.thread_id).where(table.c.thread_id == thread_id, table.c.user_id == user_id)
    return db.scalar(stmt) is not None


def engagement_snapshot(db: Session, *, thread_id: UUID, viewer_id: UUID | None) -> dict[str, Any]:
    viewer_has_liked = False
    viewer_has_saved = False
    with storage_errors(db, "fetch engagement", logger):
        like_count = db.scalar(
            select(func.count()).select_from(thread_likes).where(thread_likes.c.thread_id == thread_id)
        )
        reply_count = db.scalar(select(func.count(Thread.id)).where(Thread.parent_id == thread_id))
        if viewer_id is not None:
            viewer_has_liked = _has_pair(db, thread_likes, thread_id=thread_id, user_id=viewer_id)
            viewer_has_saved = _has_pair(db, saved_threads, thread_id=thread_id, user_id=viewer_id)
    return {
        "thread_id": thread_id,
        "like_count": int(like_count or 0),
        "reply_count": int(reply_count or 0),
        "viewer_has_liked": viewer_has_liked,
        "viewer_has_saved": viewer_has_saved,
    }


def _set_pair_state(db: Session, table: Any, *, thread_id: UUID, user_id: UUID, enabled: bool, operation: str) -> None:
    get_thread_or_404(db, thread_id)
    with storage_errors(db, operation, logger):
        existing = _has_pair(db, table, thread_id=thread_id, user_id=user_id)
        if enabled and not existing:
            db.execute(insert(table).values(thread_id=thread_id, user_id=user_id, created_at=datetime.now(timezone.utc)))
        elif not enabled and existing:
            db.execute(delete(table).where(table.c.thread_id == thread_id, table.c.user_id == user_id))
        db.commit()


def set_like_state(db: Session, *, thread_id: UUID, user_id: UUID, should_like: bool) -> dict[str, Any]:
    _set_pair_state(db, thread_likes, thread_id=thread_id, user_id=user_id, enabled=should_like, operation="update like")
    return engagement_snapshot(db, thread_id=thread_id, viewer_id=user_id)


def set_saved_state(db: Session, *, thread_id: UUID, user_id: UUID, should_save: bool) -> dict[str, Any]:
    _set_pair_state(db, saved_threads, thread_id=thread_id, user_id=user_id, enabled=should_save, operation="update save")
    return engagement_snapshot(db, thread_id=thread_id, viewer_id=user_id)


def toggle_like(db: Session, *, thread_id: UUID, user_id: UUID) -> dict[str, Any]:
    current = engagement_snapshot(db, thread_id=thread_id, viewer_id=user_id)
    return set_like_state(db, thread_id=thread_id, user_id=user_id, should_like=not current["viewer_has_liked"])


def toggle_save(db: Session, *, thread_id: UUID, user_id: UUID) -> dict[str, Any]:
    current = engagement_snapshot(db, thread_id=thread_id, viewer_id=user_id)
    return set_saved_state(db, thread_id=thread_id, user_id=user_id, should_save=not current["viewer_has_saved"])


__all__ = [
    "add_reply",
    "card_loader_options",
    "create_thread",
    "engagement_snapshot",
    "fetch_thread_by_id",
    "fetch_threads",
    "get_thread_or_404",
    "saved_thread_ids",
    "serialize_thread",
    "set_like_state",
    "set_saved_state",
    "toggle_like",
    "toggle_save",
]
