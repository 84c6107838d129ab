"""Identity provider webhooks for users, organisations and memberships."""
from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_session
from ..schemas import IdentityEvent, WebhookAck
from ..security.secrets import WEBHOOK_SECRET_ENV, MissingSecretError, require_secret
from ..services import handle_identity_event, verify_webhook_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/identity", response_model=WebhookAck)
async def identity_webhook(request: Request, db: Session = Depends(get_session)) -> WebhookAck:
    try:
        signing_key = require_secret(WEBHOOK_SECRET_ENV)
    except MissingSecretError as exc:
        logger.error("%s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Webhook signing disabled") from exc

    body = await request.body()
    timestamp = request.headers.get("x-webhook-timestamp")
    signature = request.headers.get("x-webhook-signature")
    tolerance = get_settings().identity_webhook_tolerance_seconds
    if not verify_webhook_signature(timestamp, body, signature, signing_key, tolerance_seconds=tolerance):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid webhook signature")

    try:
        event = IdentityEvent.model_validate(json.loads(body))
    except (ValueError, ValidationError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed webhook payload") from exc

    handled = handle_identity_event(db, event.type, event.data)
    return WebhookAck(status="processed" if handled else "ignored", event=event.type)


__all__ = ["router"]
