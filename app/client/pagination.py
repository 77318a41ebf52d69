# app/client/pagination.py
import logging
import math
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 24
ELLIPSIS = "..."


class Paginator:
    """
    Page index over a result set of `total_items`, `limit` items per page.

    The current page always stays within [1, total_pages]; with no results
    it is 1.
    """

    def __init__(self, total_items: int = 0, limit: int = DEFAULT_PAGE_SIZE, page: int = 1):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.total_items = max(int(total_items), 0)
        self.page = 1
        self.go_to(page)

    @classmethod
    def from_response(cls, pagination: dict) -> "Paginator":
        """
        Build from the API's pagination block
        {currentPage, totalPages, totalItems, itemsPerPage}.
        """
        return cls(
            total_items=pagination.get("totalItems", 0),
            limit=pagination.get("itemsPerPage") or DEFAULT_PAGE_SIZE,
            page=pagination.get("currentPage", 1),
        )

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def start_item(self) -> int:
        """1-based index of the first item on the page (0 when empty)."""
        if self.total_items == 0:
            return 0
        return self.offset + 1

    @property
    def end_item(self) -> int:
        return min(self.page * self.limit, self.total_items)

    def go_to(self, page: int) -> int:
        self.page = min(max(int(page), 1), max(self.total_pages, 1))
        return self.page

    def next(self) -> int:
        return self.go_to(self.page + 1)

    def previous(self) -> int:
        return self.go_to(self.page - 1)

    def first(self) -> int:
        return self.go_to(1)

    def last(self) -> int:
        return self.go_to(self.total_pages)

    def reset(self) -> int:
        # new search / filter: back to the first page
        return self.go_to(1)

    def update_total(self, total_items: int) -> int:
        self.total_items = max(int(total_items), 0)
        return self.go_to(self.page)

    def visible_pages(self, max_visible: int = 5) -> list[int | str]:
        """
        Page numbers for a pager widget, e.g. [1, "...", 4, 5, 6, "...", 10].

        First and last page are always shown; a window of `max_visible`
        pages is centred on the current page.
        """
        total = self.total_pages
        if total <= max_visible + 2:
            return list(range(1, total + 1))

        half = max_visible // 2
        start = max(self.page - half, 2)
        end = min(start + max_visible - 1, total - 1)
        start = max(min(start, end - max_visible + 1), 2)

        pages: list[int | str] = [1]
        if start > 2:
            pages.append(ELLIPSIS)
        pages.extend(range(start, end + 1))
        if end < total - 1:
            pages.append(ELLIPSIS)
        pages.append(total)
        return pages


class Debouncer:
    """
    Delay `fn` until calls stop arriving for `delay` seconds.

    Used for search-as-you-type: only the last query in a burst is sent.
    """

    def __init__(self, delay: float, fn: Callable[..., Any]):
        self.delay = delay
        self.fn = fn
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: tuple[tuple, dict] | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def call(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._generation += 1
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None

    def flush(self) -> Any:
        """Run the pending call now, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            pending, self._pending = self._pending, None
        if pending is None:
            return None
        args, kwargs = pending
        return self.fn(*args, **kwargs)

    def _fire(self, generation: int) -> None:
        with self._lock:
            # superseded by a later call
            if generation != self._generation:
                return
            pending, self._pending = self._pending, None
            self._timer = None
        if pending is None:
            return
        args, kwargs = pending
        try:
            self.fn(*args, **kwargs)
        except Exception:
            logger.exception("Debounced call failed")
