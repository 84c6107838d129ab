"""Identity provider integration: bearer token verification and user lookup."""
from __future__ import annotations

import hashlib
import hmac
import logging
import time
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import ONBOARDING_REQUIRED_DETAIL
from ..database import get_session
from ..models import User
from ..security.secrets import JWT_SECRET_ENV, MissingSecretError, require_secret
from .errors import storage_errors

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    try:
        return require_secret(JWT_SECRET_ENV)
    except MissingSecretError as exc:
        raise RuntimeError(str(exc)) from exc


def decode_identity_token(token: str) -> str:
    """Verify a provider-issued JWT and return its ``sub`` claim (the external id)."""

    settings = get_settings()
    options = {"verify_aud": settings.identity_jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            _get_jwt_secret(),
            algorithms=[settings.identity_jwt_algorithm],
            audience=settings.identity_jwt_audience,
            options=options,
        )
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return subject


def verify_webhook_signature(
    timestamp: str | None,
    body: bytes,
    signature: str | None,
    signing_key: str,
    *,
    tolerance_seconds: int = 300,
    now: float | None = None,
) -> bool:
    """Check a webhook delivery signed as HMAC-SHA256 over ``"{timestamp}.{body}"``.

    ``timestamp`` is in Unix seconds; deliveries signed more than
    ``tolerance_seconds`` away from ``now`` are rejected.
    """

    if not timestamp or not signature:
        return False
    try:
        signed_at = int(timestamp)
    except ValueError:
        return False
    current = time.time() if now is None else now
    if abs(current - signed_at) > tolerance_seconds:
        return False
    message = timestamp.encode("utf-8") + b"." + body
    digest = hmac.new(signing_key.encode("utf-8"), msg=message, digestmod=hashlib.sha256).hexdigest()
    return hmac.compare_digest(digest, signature)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
) -> str:
    """Resolve the external id of the signed-in user from the bearer token."""

    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return decode_identity_token(credentials.credentials)


async def get_current_user(
    external_id: str = Depends(get_current_identity),
    db: Session = Depends(get_session),
) -> User:
    """Return the onboarded local user for the signed-in identity."""

    with storage_errors(db, "look up current user", logger):
        user = db.scalar(select(User).where(User.external_id == external_id))
    if user is None or not user.onboarded:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ONBOARDING_REQUIRED_DETAIL)
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_session),
) -> User | None:
    """Return the local user when a valid bearer token is provided."""

    if not credentials or credentials.scheme.lower() != "bearer":
        return None

    try:
        external_id = decode_identity_token(credentials.credentials)
    except HTTPException:
        return None

    with storage_errors(db, "look up current user", logger):
        return db.scalar(select(User).where(User.external_id == external_id))


__all__ = [
    "decode_identity_token",
    "verify_webhook_signature",
    "get_current_identity",
    "get_current_user",
    "get_optional_user",
]
