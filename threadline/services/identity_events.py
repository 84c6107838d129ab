"""Apply identity provider webhook events to local users and communities."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import User
from .community_service import add_member, create_community, find_community, remove_member, update_community_info
from .errors import storage_errors

logger = logging.getLogger(__name__)


def _require(data: dict[str, Any], key: str) -> Any:
    value = data.get(key)
    if value in (None, ""):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Event payload missing {key}")
    return value


def _display_name(data: dict[str, Any]) -> str:
    parts = [data.get("first_name") or "", data.get("last_name") or ""]
    return " ".join(part for part in parts if part).strip()


def _find_user(db: Session, external_id: str) -> User | None:
    with storage_errors(db, "look up user", logger):
        return db.scalar(select(User).where(User.external_id == external_id))


def _shell_username(db: Session, data: dict[str, Any], external_id: str) -> str:
    """Provider username, or the external id when a local user already holds it."""

    fallback = external_id.lower()
    wanted = (data.get("username") or "").strip().lower()
    if not wanted or wanted == fallback:
        return fallback
    with storage_errors(db, "look up user", logger):
        taken = db.scalar(select(User.id).where(User.username == wanted))
    if taken is not None:
        logger.info("Username %s already taken; shell user %s keeps its external id", wanted, external_id)
        return fallback
    return wanted


def sync_identity_user(db: Session, data: dict[str, Any]) -> User:
    """Upsert the local shell of a provider user without marking it onboarded.

    The shell username is provisional; the user picks their own while
    onboarding through ``PUT /users/me``.
    """

    external_id = str(_require(data, "id"))
    user = _find_user(db, external_id)
    if user is None:
        username = _shell_username(db, data, external_id)
        user = User(
            external_id=external_id,
            username=username,
            name=_display_name(data),
            image=data.get("image_url"),
            created_at=datetime.now(timezone.utc),
        )
        db.add(user)
    else:
        user.image = data.get("image_url") or user.image
        if not user.name:
            user.name = _display_name(data)

    with storage_errors(db, "sync identity user", logger):
        db.commit()
    db.refresh(user)
    return user


def _organization_created(db: Session, data: dict[str, Any]) -> None:
    external_id = str(_require(data, "id"))
    if find_community(db, external_id) is not None:
        # Redelivery of an organisation we already hold
        _organization_updated(db, data)
        return

    creator_id = data.get("created_by")
    if creator_id and _find_user(db, str(creator_id)) is None:
        logger.info("Creator %s of organization %s is not synced yet", creator_id, external_id)
        creator_id = None

    create_community(
        db,
        external_id=external_id,
        name=str(_require(data, "name")),
        username=str(data.get("slug") or external_id),
        image=data.get("image_url") or data.get("logo_url"),
        created_by_external_id=str(creator_id) if creator_id else None,
    )


def _organization_updated(db: Session, data: dict[str, Any]) -> None:
    update_community_info(
        db,
        external_id=str(_require(data, "id")),
        name=data.get("name"),
        username=data.get("slug"),
        image=data.get("image_url") or data.get("logo_url"),
    )


def _membership_ids(data: dict[str, Any]) -> tuple[str, str]:
    organization = data.get("organization") or {}
    public_user = data.get("public_user_data") or {}
    return str(_require(organization, "id")), str(_require(public_user, "user_id"))


def _membership_created(db: Session, data: dict[str, Any]) -> None:
    community_id, user_id = _membership_ids(data)
    add_member(db, community_external_id=community_id, user_external_id=user_id)


def _membership_deleted(db: Session, data: dict[str, Any]) -> None:
    community_id, user_id = _membership_ids(data)
    remove_member(db, community_external_id=community_id, user_external_id=user_id)


_HANDLERS: dict[str, Callable[[Session, dict[str, Any]], Any]] = {
    "user.created": sync_identity_user,
    "user.updated": sync_identity_user,
    "organization.created": _organization_created,
    "organization.updated": _organization_updated,
    "organizationMembership.created": _membership_created,
    "organizationMembership.deleted": _membership_deleted,
}


def handle_identity_event(db: Session, event_type: str, data: dict[str, Any]) -> bool:
    """Dispatch one webhook event; returns ``False`` for event types we ignore."""

    handler = _HANDLERS.get(event_type)
    if handler is None:
        logger.info("Ignoring identity event %s", event_type)
        return False
    handler(db, data)
    logger.info("Processed identity event %s", event_type)
    return True


__all__ = ["handle_identity_event", "sync_identity_user"]
