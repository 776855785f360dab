"""Ranking, top-N chart feeds and table pagination."""

import math
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")

PAGE_SIZE_OPTIONS = (5, 10, 20)
DEFAULT_TOP_N = 5


class InvalidPageError(ValueError):
    """A page number entered by the user was not a page in range."""

    def __init__(self, value: Any, total_pages: int):
        self.value = value
        self.total_pages = total_pages
        super().__init__(f"Invalid page number {value!r}: enter a whole number from 1 to {total_pages}")


def rank(buckets: Sequence[T], by: str = "total_commission", n: Optional[int] = None) -> List[T]:
    """Sort buckets descending by an attribute, optionally keeping the first n.

    The sort is stable, so equal values keep their accumulation order.
    """
    ranked = sorted(buckets, key=lambda b: getattr(b, by), reverse=True)
    if n is not None:
        ranked = ranked[:max(n, 0)]
    return ranked


def top_n(buckets: Sequence[T], n: int = DEFAULT_TOP_N, by: str = "total_commission") -> List[T]:
    """Chart feed: the n highest buckets."""
    return rank(buckets, by=by, n=n)


def total_pages(total_items: int, page_size: int) -> int:
    """Number of pages, never less than one."""
    if page_size <= 0:
        raise ValueError(f"Page size must be positive, got {page_size}")
    return max(1, math.ceil(total_items / page_size))


@dataclass
class Page(Generic[T]):
    """One window of a ranked list."""
    items: List[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def page_window(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """Slice items [(page-1)*size, page*size) with page clamped into range."""
    pages = total_pages(len(items), page_size)
    page = min(max(page, 1), pages)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_items=len(items),
        total_pages=pages
    )


@dataclass
class Paginator(Generic[T]):
    """Page state for a table view.

    Moving to a page outside the valid range leaves the state unchanged.
    Typed page jumps that do not parse are rejected with InvalidPageError.
    """
    items: List[T] = field(default_factory=list)
    page_size: int = 10
    current_page: int = 1

    def __post_init__(self):
        if self.page_size not in PAGE_SIZE_OPTIONS:
            raise ValueError(f"Page size must be one of {PAGE_SIZE_OPTIONS}")
        self.current_page = min(max(self.current_page, 1), self.total_pages)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.items), self.page_size)

    @property
    def page(self) -> Page[T]:
        return page_window(self.items, self.current_page, self.page_size)

    def go_to(self, page: int) -> bool:
        """Move to a page; returns False (and does nothing) when out of range."""
        if not isinstance(page, int) or isinstance(page, bool) or not 1 <= page <= self.total_pages:
            return False
        self.current_page = page
        return True

    def next_page(self) -> bool:
        return self.go_to(self.current_page + 1)

    def previous_page(self) -> bool:
        return self.go_to(self.current_page - 1)

    def set_page_size(self, page_size: int):
        """Change the page size and return to the first page."""
        if page_size not in PAGE_SIZE_OPTIONS:
            raise ValueError(f"Page size must be one of {PAGE_SIZE_OPTIONS}")
        self.page_size = page_size
        self.current_page = 1

    def jump(self, value: Any) -> Page[T]:
        """Jump to a page typed by the user."""
        try:
            page = int(str(value).strip())
        except (TypeError, ValueError):
            raise InvalidPageError(value, self.total_pages)
        if not self.go_to(page):
            raise InvalidPageError(value, self.total_pages)
        return self.page

    def replace_items(self, items: List[T]):
        """Swap in a recomputed list, keeping the page when still valid."""
        self.items = list(items)
        if self.current_page > self.total_pages:
            self.current_page = 1
