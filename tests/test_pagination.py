"""Unit tests for the offset pagination helpers."""
from __future__ import annotations

import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_threadline.db")

from threadline.services.pagination import Page, contains_pattern, has_next_page, skip_amount  # noqa: E402


@pytest.mark.parametrize(
    "total, skip, returned, expected",
    [
        (0, 0, 0, False),
        (5, 0, 5, False),
        (6, 0, 5, True),
        (45, 40, 5, False),
        (46, 40, 5, True),
        (3, 20, 0, False),
    ],
)
def test_has_next_page_compares_total_with_consumed_rows(total, skip, returned, expected):
    assert has_next_page(total, skip, returned) is expected


def test_skip_amount_is_zero_based_on_first_page():
    assert skip_amount(1, 20) == 0
    assert skip_amount(3, 10) == 20


@pytest.mark.parametrize("page_number, page_size", [(0, 10), (1, 0), (-2, 5)])
def test_skip_amount_rejects_out_of_range_values(page_number, page_size):
    with pytest.raises(ValueError):
        skip_amount(page_number, page_size)


def test_page_is_next_uses_item_count():
    page = Page(items=["a", "b"], total=5, skip=2, page_number=2, page_size=2)
    assert page.is_next is True
    assert Page(items=[], total=0).is_next is False


def test_contains_pattern_escapes_like_wildcards():
    assert contains_pattern("ann") == "%ann%"
    assert contains_pattern("50%_off") == "%50\\%\\_off%"
