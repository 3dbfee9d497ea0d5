"""Pagination stage and pagination display computation."""

import math
import threading
from typing import List, Optional

from pydantic import BaseModel

from salesgrid.utils.logging import get_logger

from .actions import Action, FirstAction, LastAction, NextAction, PrevAction
from .stage import Query, QueryStage, StageResult
from .state import StatePatch, TableState

logger = get_logger(__name__)

DEFAULT_PAGE_WINDOW = 5


class PaginationDisplay(BaseModel):
    page_count: int
    visible_pages: List[int]
    from_row: int
    to_row: int
    total: int


def page_count_for(total: int, limit: int) -> int:
    if limit < 1:
        raise ValueError(f"limit must be positive, got {limit}")
    return math.ceil(max(total, 0) / limit)


def visible_pages(page: int, page_count: int, window: int = DEFAULT_PAGE_WINDOW) -> List[int]:
    """
    Sliding window of page numbers centered as closely as possible on `page`.

    Returns:
        At most `window` consecutive page numbers within [1, page_count]
    """
    if page_count < 1:
        return []
    size = min(window, page_count)
    current = max(1, min(page_count, page))
    start = max(1, current - size // 2)
    end = start + size - 1
    if end > page_count:
        end = page_count
        start = end - size + 1
    return list(range(start, end + 1))


def row_range(total: int, page: int, limit: int) -> tuple[int, int]:
    """
    Inclusive 1-based row range shown on a page.

    An empty dataset yields (0, 0).
    """
    if total <= 0:
        return 0, 0
    return (page - 1) * limit + 1, min(page * limit, total)


class PaginationState:
    """Page count retained across cycles for resolving navigation actions."""

    def __init__(self, window: int = DEFAULT_PAGE_WINDOW):
        self.window = window
        self._page_count: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def page_count(self) -> Optional[int]:
        """Page count from the last update, None before the first one."""
        with self._lock:
            return self._page_count

    def display(self, total: int, page: int, limit: int) -> PaginationDisplay:
        """Display data for a fetched page, leaving the retained page count alone."""
        page_count = page_count_for(total, limit)
        from_row, to_row = row_range(total, page, limit)
        return PaginationDisplay(
            page_count=page_count,
            visible_pages=visible_pages(page, page_count, self.window),
            from_row=from_row,
            to_row=to_row,
            total=total,
        )

    def update(self, total: int, page: int, limit: int) -> PaginationDisplay:
        """Recompute the page count and the display data for a fetched page."""
        display = self.display(total, page, limit)
        with self._lock:
            self._page_count = display.page_count
        return display


class PaginationStage(QueryStage):
    """Sets `limit` and `page`, resolving navigation actions against the page count."""

    def __init__(self, pagination: PaginationState):
        self.pagination = pagination

    def resolve_page(self, page: int, action: Optional[Action]) -> int:
        page_count = self.pagination.page_count
        # Before the first fetch the last page is unknown; stay put.
        last = page_count if page_count is not None else page
        last = max(1, last)

        if isinstance(action, PrevAction):
            return max(1, page - 1)
        if isinstance(action, NextAction):
            return min(last, page + 1)
        if isinstance(action, FirstAction):
            return 1
        if isinstance(action, LastAction):
            return last
        return page

    def apply(self, query: Query, state: TableState, action: Optional[Action]) -> StageResult:
        page = self.resolve_page(state.page, action)
        if page != state.page:
            logger.debug(f"Page {state.page} -> {page}")

        result = dict(query)
        result["limit"] = str(state.rows_per_page)
        result["page"] = str(page)
        return StageResult(result, StatePatch(page=page))
