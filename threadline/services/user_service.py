"""Business logic for user profiles, search, replies, saves and activity."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Literal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from ..models import Thread, User, saved_threads
from .errors import storage_errors
from .pagination import Page, contains_pattern, paginate
from .thread_service import card_loader_options

logger = logging.getLogger(__name__)


def get_user_or_404(db: Session, external_id: str) -> User:
    with storage_errors(db, "look up user", logger):
        user = db.scalar(select(User).where(User.external_id == external_id))
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def fetch_user(db: Session, external_id: str) -> User:
    """Return a user with communities, authored threads and saved threads loaded."""

    stmt = (
        select(User)
        .where(User.external_id == external_id)
        .options(selectinload(User.communities), selectinload(User.threads), selectinload(User.saved))
        .execution_options(populate_existing=True)
    )
    with storage_errors(db, "fetch user", logger):
        user = db.scalar(stmt)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def update_user(
    db: Session,
    *,
    external_id: str,
    username: str,
    name: str,
    bio: str | None = None,
    image: str | None = None,
) -> User:
    """Create or update the profile for ``external_id`` and mark it onboarded."""

    normalized = username.strip().lower()
    with storage_errors(db, "look up user", logger):
        clash = db.scalar(select(User).where(User.username == normalized, User.external_id != external_id))
        user = db.scalar(select(User).where(User.external_id == external_id))
    if clash is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already in use")

    if user is None:
        user = User(external_id=external_id, created_at=datetime.now(timezone.utc))
        db.add(user)

    user.username = normalized
    user.name = name
    user.bio = bio
    user.image = image
    user.onboarded = True

    with storage_errors(db, "create/update user", logger):
        db.commit()
    db.refresh(user)
    return user


def fetch_user_posts(db: Session, external_id: str) -> tuple[User, list[Thread]]:
    """Return the user's top-level threads with community and reply authors."""

    user = get_user_or_404(db, external_id)
    stmt = (
        select(Thread)
        .where(Thread.author_id == user.id, Thread.parent_id.is_(None))
        .order_by(Thread.created_at.desc())
        .options(*card_loader_options())
    )
    with storage_errors(db, "fetch user threads", logger):
        threads = list(db.scalars(stmt))
    return user, threads


def fetch_users(
    db: Session,
    *,
    requester_external_id: str,
    search: str = "",
    page_number: int = 1,
    page_size: int = 20,
    sort: Literal["asc", "desc"] = "desc",
) -> Page[User]:
    """Search users by username or name, never returning the requester."""

    stmt = select(User).where(User.external_id != requester_external_id)
    term = (search or "").strip()
    if term:
        pattern = contains_pattern(term)
        stmt = stmt.where(or_(User.username.ilike(pattern, escape="\\"), User.name.ilike(pattern, escape="\\")))

    order = User.created_at.asc() if sort == "asc" else User.created_at.desc()
    stmt = stmt.order_by(order, User.id)

    with storage_errors(db, "fetch users", logger):
        return paginate(db, stmt, page_number=page_number, page_size=page_size)


def get_activity(db: Session, user_id: UUID) -> list[Thread]:
    """Return replies other users left on ``user_id``'s threads, newest first."""

    with storage_errors(db, "fetch activity", logger):
        own_threads = db.scalars(
            select(Thread)
            .where(Thread.author_id == user_id)
            .options(selectinload(Thread.children))
            .execution_options(populate_existing=True)
        ).all()

        child_ids: list[UUID] = []
        for thread in own_threads:
            child_ids.extend(child.id for child in thread.children)
        if not child_ids:
            return []

        stmt = (
            select(Thread)
            .where(Thread.id.in_(child_ids), Thread.author_id != user_id)
            .order_by(Thread.created_at.desc())
            .options(selectinload(Thread.author))
        )
        return list(db.scalars(stmt))


def fetch_user_replies(db: Session, external_id: str) -> list[Thread]:
    """Return every reply ``external_id`` has written, newest first."""

    user = get_user_or_404(db, external_id)
    stmt = (
        select(Thread)
        .where(Thread.author_id == user.id, Thread.parent_id.is_not(None))
        .order_by(Thread.created_at.desc())
        .options(*card_loader_options())
    )
    with storage_errors(db, "fetch user replies", logger):
        return list(db.scalars(stmt))


def fetch_user_saved(db: Session, external_id: str) -> list[Thread]:
    """Resolve the user's saved list into thread records, most recently saved first."""

    user = get_user_or_404(db, external_id)
    stmt = (
        select(Thread)
        .join(saved_threads, saved_threads.c.thread_id == Thread.id)
        .where(saved_threads.c.user_id == user.id)
        .order_by(saved_threads.c.created_at.desc())
        .options(*card_loader_options())
    )
    with storage_errors(db, "fetch saved threads", logger):
        return list(db.scalars(stmt))


def fetch_suggested_users(db: Session, *, requester_external_id: str, limit: int = 4) -> list[User]:
    """Return a random handful of other users with their threads loaded."""

    stmt = (
        select(User)
        .where(User.external_id != requester_external_id)
        .order_by(func.random())
        .limit(limit)
        .options(selectinload(User.threads))
    )
    with storage_errors(db, "fetch suggested users", logger):
        return list(db.scalars(stmt))


__all__ = [
    "fetch_suggested_users",
    "fetch_user",
    "fetch_user_posts",
    "fetch_user_replies",
    "fetch_user_saved",
    "fetch_users",
    "get_activity",
    "get_user_or_404",
    "update_user",
]
