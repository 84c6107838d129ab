"""Error types shared by the data-access services."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


class DataAccessError(RuntimeError):
    """Raised when a storage operation fails; carries the original message."""


@contextmanager
def storage_errors(db: Session, operation: str, logger: logging.Logger) -> Iterator[None]:
    """Roll back, log and re-raise storage failures as :class:`DataAccessError`."""

    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s", operation)
        raise DataAccessError(f"Failed to {operation}: {exc}") from exc


__all__ = ["DataAccessError", "storage_errors"]
