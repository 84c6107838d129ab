"""Read the identity provider's signing secrets from the environment."""
from __future__ import annotations

import os

JWT_SECRET_ENV = "IDENTITY_JWT_SECRET"
WEBHOOK_SECRET_ENV = "IDENTITY_WEBHOOK_SECRET"

# Values shipped in .env.example and provider dashboards before a real key is pasted
_PLACEHOLDERS = frozenset({"changeme", "change-me", "placeholder", "whsec_placeholder", "your-secret-here"})


class MissingSecretError(RuntimeError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name} must be set to the identity provider's signing secret")
        self.name = name


def require_secret(name: str) -> str:
    """Return the stripped value of ``name``; unset or placeholder values raise."""

    value = (os.getenv(name) or "").strip()
    if not value or value.lower() in _PLACEHOLDERS:
        raise MissingSecretError(name)
    return value


__all__ = ["JWT_SECRET_ENV", "WEBHOOK_SECRET_ENV", "MissingSecretError", "require_secret"]
