"""Helpers for walking paginated tracker listings."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .protocols import Page

T = TypeVar("T")


def iter_pages(first_page: Page[T]) -> Iterator[Page[T]]:
    """Yield ``first_page`` and every page after it, fetching lazily."""
    page = first_page
    yield page
    while page.has_next_page():
        page = page.get_next_page()
        yield page


def paginate(first_page: Page[T]) -> list[T]:
    """Collect the items of all pages, in order.

    Errors raised while fetching a page propagate unchanged; nothing
    collected so far is returned in that case.
    """
    items: list[T] = []
    for page in iter_pages(first_page):
        items.extend(page.items)
    return items
