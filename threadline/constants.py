"""Project-wide constant values."""
from __future__ import annotations

THREAD_TEXT_MAX_LENGTH = 1000

ONBOARDING_REQUIRED_DETAIL = "Complete onboarding before using this endpoint."

STORAGE_FAILURE_DETAIL = "Storage operation failed"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

__all__ = ["THREAD_TEXT_MAX_LENGTH", "ONBOARDING_REQUIRED_DETAIL", "STORAGE_FAILURE_DETAIL", "LOG_FORMAT"]
