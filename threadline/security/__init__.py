"""Helpers for reading identity provider secrets."""
from .secrets import JWT_SECRET_ENV, WEBHOOK_SECRET_ENV, MissingSecretError, require_secret

__all__ = ["JWT_SECRET_ENV", "WEBHOOK_SECRET_ENV", "MissingSecretError", "require_secret"]
