"""Schemas for identity provider webhook deliveries."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class IdentityEvent(BaseModel):
    type: str
    data: dict[str, Any] = Field(default_factory=dict)


class WebhookAck(BaseModel):
    status: str
    event: str


__all__ = ["IdentityEvent", "WebhookAck"]
