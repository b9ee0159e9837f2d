from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

SHOW_ALL = -1


class PageAction(str, Enum):
    FIRST = "first"
    PREVIOUS = "previous"
    NEXT = "next"
    LAST = "last"


@dataclass(frozen=True)
class AbsolutePage:
    """Jump to zero-based page `page`."""
    page: int


Navigation = Union[PageAction, AbsolutePage]


def absolute(page: int) -> AbsolutePage:
    return AbsolutePage(page=int(page))


@dataclass(frozen=True)
class PageInfo:
    """Derived pagination numbers for pagination UI collaborators."""
    start: int
    end: int
    length: int
    total: int
    page: int
    pages: int


class Paginator:
    """
    Pagination window over the display order.

    Holds `page_start` and `page_length`; the total row count is passed in
    by the caller because it changes with every filter/delete.
    """

    def __init__(self, page_length: int = 10, page_start: int = 0):
        if page_length == 0 or page_length < SHOW_ALL:
            raise ValueError(f"page_length must be positive or {SHOW_ALL}, got {page_length}")
        self.page_length = page_length
        self.page_start = max(0, page_start)

    @property
    def show_all(self) -> bool:
        return self.page_length == SHOW_ALL

    def _last_start(self, total: int) -> int:
        if self.show_all or total <= 0:
            return 0
        return ((total - 1) // self.page_length) * self.page_length

    def visible_end(self, total: int) -> int:
        if self.show_all:
            return total
        return min(self.page_start + self.page_length, total)

    def clamp(self, total: int) -> None:
        """Pull `page_start` back into [0, total) after the display order shrank."""
        if self.show_all or total <= 0:
            self.page_start = 0
        elif self.page_start >= total:
            self.page_start = self._last_start(total)

    def page_change(self, action: Union[Navigation, str, int], total: int) -> bool:
        """
        Move the window. Returns True if `page_start` changed.

        `action` may be a PageAction (or its string value), an AbsolutePage,
        or a bare int page number.
        """
        if isinstance(action, bool):
            raise ValueError(f"Unknown paging action: {action!r}")
        if isinstance(action, int):
            action = absolute(action)
        elif isinstance(action, str):
            action = PageAction(action.lower())

        before = self.page_start
        length = self.page_length

        if self.show_all:
            self.page_start = 0
        elif isinstance(action, AbsolutePage):
            start = action.page * length
            self.page_start = 0 if start < 0 else min(start, self._last_start(total))
        elif action is PageAction.FIRST:
            self.page_start = 0
        elif action is PageAction.PREVIOUS:
            self.page_start = max(0, self.page_start - length)
        elif action is PageAction.NEXT:
            if self.page_start + length < total:
                self.page_start += length
        elif action is PageAction.LAST:
            self.page_start = self._last_start(total)
        else:
            raise ValueError(f"Unknown paging action: {action!r}")

        return self.page_start != before

    def set_length(self, page_length: int, total: int) -> None:
        """Change the page length, keeping the old first row on the new page."""
        if page_length == 0 or page_length < SHOW_ALL:
            raise ValueError(f"page_length must be positive or {SHOW_ALL}, got {page_length}")
        self.page_length = page_length
        if self.show_all:
            self.page_start = 0
        else:
            self.page_start = (self.page_start // page_length) * page_length
            self.clamp(total)

    def page_info(self, total: int) -> PageInfo:
        if self.show_all or total == 0:
            page, pages = 0, 1
        else:
            page = self.page_start // self.page_length
            pages = (total - 1) // self.page_length + 1
        return PageInfo(
            start=self.page_start,
            end=self.visible_end(total),
            length=self.page_length,
            total=total,
            page=page,
            pages=pages,
        )
