"""Page clamping and slicing."""

from __future__ import annotations

from typing import TypeVar

_T = TypeVar("_T")

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


def clamp_page(page: int, page_size: int) -> tuple[int, int]:
    """Normalize a requested page: ``page_size`` into [1, 100], ``page`` at least 1."""
    return max(page, 1), max(MIN_PAGE_SIZE, min(page_size, MAX_PAGE_SIZE))


def paginate(items: list[_T], page: int, page_size: int) -> list[_T]:
    """Return the requested page of *items* (empty past the last page)."""
    page, page_size = clamp_page(page, page_size)
    start = (page - 1) * page_size
    return items[start : start + page_size]
