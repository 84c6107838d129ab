"""Business logic for communities and their memberships."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Literal

from fastapi import HTTPException, status
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from ..models import Community, Thread, User
from .errors import storage_errors
from .pagination import Page, contains_pattern, paginate
from .thread_service import card_loader_options

logger = logging.getLogger(__name__)


def find_community(db: Session, external_id: str) -> Community | None:
    with storage_errors(db, "look up community", logger):
        return db.scalar(select(Community).where(Community.external_id == external_id))


def _get_community_or_404(db: Session, external_id: str) -> Community:
    community = find_community(db, external_id)
    if community is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Community not found")
    return community


def _get_user_or_404(db: Session, external_id: str) -> User:
    with storage_errors(db, "look up user", logger):
        user = db.scalar(select(User).where(User.external_id == external_id))
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def create_community(
    db: Session,
    *,
    external_id: str,
    name: str,
    username: str,
    image: str | None = None,
    bio: str | None = None,
    created_by_external_id: str | None = None,
) -> Community:
    """Create a community; its creator, when known, becomes the first member."""

    with storage_errors(db, "look up community", logger):
        existing = db.scalar(
            select(Community).where(or_(Community.external_id == external_id, Community.username == username))
        )
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Community already exists")

    creator = _get_user_or_404(db, created_by_external_id) if created_by_external_id else None
    community = Community(
        external_id=external_id,
        name=name,
        username=username,
        image=image,
        bio=bio,
        created_by=creator,
        created_at=datetime.now(timezone.utc),
    )
    if creator is not None:
        community.members.append(creator)

    with storage_errors(db, "create community", logger):
        db.add(community)
        db.commit()
    db.refresh(community)
    return community


def fetch_community_details(db: Session, external_id: str) -> Community:
    stmt = (
        select(Community)
        .where(Community.external_id == external_id)
        .options(selectinload(Community.created_by), selectinload(Community.members))
        .execution_options(populate_existing=True)
    )
    with storage_errors(db, "fetch community details", logger):
        community = db.scalar(stmt)
    if community is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Community not found")
    return community


def count_community_threads(db: Session, community: Community) -> int:
    stmt = select(func.count(Thread.id)).where(Thread.community_id == community.id)
    with storage_errors(db, "count community threads", logger):
        return int(db.scalar(stmt) or 0)


def fetch_community_threads(db: Session, external_id: str) -> list[Thread]:
    """Return the community's top-level threads, newest first."""

    community = _get_community_or_404(db, external_id)
    stmt = (
        select(Thread)
        .where(Thread.community_id == community.id, Thread.parent_id.is_(None))
        .order_by(Thread.created_at.desc())
        .options(*card_loader_options())
    )
    with storage_errors(db, "fetch community threads", logger):
        return list(db.scalars(stmt))


def fetch_communities(
    db: Session,
    *,
    search: str = "",
    page_number: int = 1,
    page_size: int = 20,
    sort: Literal["asc", "desc"] = "desc",
) -> Page[Community]:
    """Search communities by username or name."""

    stmt = select(Community)
    term = (search or "").strip()
    if term:
        pattern = contains_pattern(term)
        stmt = stmt.where(
            or_(Community.username.ilike(pattern, escape="\\"), Community.name.ilike(pattern, escape="\\"))
        )
    order = Community.created_at.asc() if sort == "asc" else Community.created_at.desc()
    stmt = stmt.order_by(order, Community.id)

    with storage_errors(db, "fetch communities", logger):
        return paginate(db, stmt, page_number=page_number, page_size=page_size)


def add_member(db: Session, *, community_external_id: str, user_external_id: str) -> tuple[Community, User, bool]:
    """Add a member; returns ``changed=False`` when they already belong."""

    community = fetch_community_details(db, community_external_id)
    user = _get_user_or_404(db, user_external_id)
    if any(member.id == user.id for member in community.members):
        return community, user, False

    community.members.append(user)
    with storage_errors(db, "add community member", logger):
        db.commit()
    return community, user, True


def remove_member(db: Session, *, community_external_id: str, user_external_id: str) -> tuple[Community, User, bool]:
    community = fetch_community_details(db, community_external_id)
    user = _get_user_or_404(db, user_external_id)
    member = next((item for item in community.members if item.id == user.id), None)
    if member is None:
        return community, user, False

    community.members.remove(member)
    with storage_errors(db, "remove community member", logger):
        db.commit()
    return community, user, True


def update_community_info(
    db: Session,
    *,
    external_id: str,
    name: str | None = None,
    username: str | None = None,
    image: str | None = None,
) -> Community:
    community = _get_community_or_404(db, external_id)
    if username is not None and username != community.username:
        with storage_errors(db, "look up community", logger):
            clash = db.scalar(select(Community).where(Community.username == username, Community.id != community.id))
        if clash is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Community username already in use")
        community.username = username
    if name is not None:
        community.name = name
    if image is not None:
        community.image = image

    with storage_errors(db, "update community", logger):
        db.commit()
    db.refresh(community)
    return community


__all__ = [
    "add_member",
    "count_community_threads",
    "create_community",
    "fetch_communities",
    "fetch_community_details",
    "fetch_community_threads",
    "find_community",
    "remove_member",
    "update_community_info",
]
