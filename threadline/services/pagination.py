"""Offset pagination shared by the user, community and feed listings."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

T = TypeVar("T")


def skip_amount(page_number: int, page_size: int) -> int:
    """Return how many rows precede ``page_number`` (1-based)."""

    if page_number < 1:
        raise ValueError("page_number must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    return (page_number - 1) * page_size


def contains_pattern(term: str) -> str:
    """Build a LIKE pattern matching ``term`` anywhere, with its wildcards escaped."""

    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def has_next_page(total: int, skip: int, returned: int) -> bool:
    """True when rows remain beyond the ones already returned."""

    return total > skip + returned


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    total: int = 0
    skip: int = 0
    page_number: int = 1
    page_size: int = 20

    @property
    def is_next(self) -> bool:
        return has_next_page(self.total, self.skip, len(self.items))


def count_rows(db: Session, statement: Select[Any]) -> int:
    """Count the rows ``statement`` would return, ignoring ordering and limits."""

    subquery = statement.order_by(None).subquery()
    return int(db.scalar(select(func.count()).select_from(subquery)) or 0)


def paginate(
    db: Session,
    statement: Select[Any],
    *,
    page_number: int,
    page_size: int,
    options: Sequence[Any] = (),
) -> Page[Any]:
    """Run ``statement`` for one page and count the full match set.

    Loader ``options`` apply to the page query only, not to the count.
    """

    skip = skip_amount(page_number, page_size)
    total = count_rows(db, statement)
    page_statement = statement.offset(skip).limit(page_size)
    if options:
        page_statement = page_statement.options(*options)
    items = list(db.scalars(page_statement).unique())
    return Page(items=items, total=total, skip=skip, page_number=page_number, page_size=page_size)


__all__ = ["Page", "contains_pattern", "count_rows", "has_next_page", "paginate", "skip_amount"]
