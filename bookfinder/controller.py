"""View state for the book finder front end.

The controller owns every piece of UI state and is driven by user actions.
Search results follow last-request-wins: each fetch takes a sequence number
and its response is applied only if no newer fetch has been issued since.
Book detail is tracked separately and follows the same rule, so closing the
detail view makes any in-flight detail response a no-op.
"""
import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, List, Optional, Set, Tuple

from bookfinder.config import Config
from bookfinder.errors import BookServiceError
from bookfinder.models import Book, Filters
from bookfinder.pagination import offset_for_page, paginate

logger = logging.getLogger(__name__)

FILTER_KEYS = ("subject", "language")


class Status(Enum):
    """Lifecycle of the result list."""
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class DetailStatus(Enum):
    """Lifecycle of the detail view; NONE means nothing is selected."""
    NONE = "none"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass(frozen=True)
class ViewState:
    """Everything the presentation layer needs to render one frame."""
    query: str
    filters: Filters
    status: Status
    books: List[Book] = field(default_factory=list)
    total_items: int = 0
    current_page: int = 1
    total_pages: int = 0
    error: Optional[str] = None
    selected_book_id: Optional[str] = None
    detail_status: DetailStatus = DetailStatus.NONE
    detail: Optional[Book] = None
    detail_error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status is Status.LOADING

    @property
    def detail_loading(self) -> bool:
        return self.detail_status is DetailStatus.LOADING

    @property
    def show_pagination(self) -> bool:
        return self.status is Status.SUCCESS and self.total_pages > 1

    @property
    def is_empty(self) -> bool:
        """Successful search that matched nothing."""
        return self.status is Status.SUCCESS and not self.books

    @property
    def has_active_filters(self) -> bool:
        """Whether a non-default filter is applied and can be cleared."""
        return not self.filters.is_default


class Debouncer:
    """
    Call ``callback(value)`` once input has been quiet for ``delay`` seconds.

    Each call replaces the pending one, so a stale value never fires.
    Must be called from inside a running event loop.
    """

    def __init__(self, delay: float, callback: Callable[[Any], None]):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    def __call__(self, value: Any):
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, value)

    def _fire(self, value: Any):
        self._handle = None
        self.callback(value)

    @property
    def pending(self) -> bool:
        """Whether a value is waiting to fire."""
        return self._handle is not None

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class ViewStateController:
    """Holds UI state and sequences calls to the search and detail clients."""

    def __init__(
        self,
        client,
        page_size: int = Config.BOOKS_PER_PAGE,
        page_ceiling: int = Config.MAX_PAGES,
        debounce_delay: float = Config.SEARCH_DEBOUNCE_DELAY,
        on_change: Optional[Callable[[ViewState], None]] = None
    ):
        """
        Args:
            client: Object with async ``search`` and ``get_details`` methods,
                normally an AsyncOpenLibraryClient
            page_size: Results per page for the whole session
            page_ceiling: Maximum reachable page
            debounce_delay: Quiet interval before a typed query is searched
            on_change: Called with a fresh ViewState after every change
        """
        self.client = client
        self.page_size = page_size
        self.page_ceiling = page_ceiling
        self.on_change = on_change

        self.query = ""
        self.active_query = ""
        self.filters = Filters()

        self.status = Status.LOADING
        self.books: List[Book] = []
        self.total_items = 0
        self.current_page = 1
        self.error: Optional[str] = None

        self.selected_book_id: Optional[str] = None
        self.detail_status = DetailStatus.NONE
        self.detail: Optional[Book] = None
        self.detail_error: Optional[str] = None

        self._request_seq = 0
        self._detail_seq = 0
        self._last_request: Optional[Tuple[str, int, Filters]] = None
        self._tasks: Set[asyncio.Task] = set()
        self._debouncer = Debouncer(debounce_delay, self._commit_query)

    @property
    def total_pages(self) -> int:
        """Reachable pages for the current result count."""
        return paginate(self.total_items, self.page_size, self.page_ceiling)

    def snapshot(self) -> ViewState:
        """Immutable copy of the current state."""
        return ViewState(
            query=self.query,
            filters=self.filters,
            status=self.status,
            books=list(self.books),
            total_items=self.total_items,
            current_page=self.current_page,
            total_pages=self.total_pages,
            error=self.error,
            selected_book_id=self.selected_book_id,
            detail_status=self.detail_status,
            detail=self.detail,
            detail_error=self.detail_error
        )

    def _notify(self):
        if self.on_change is not None:
            self.on_change(self.snapshot())

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self):
        """Wait until every fetch started by the debouncer has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # Search

    async def start(self):
        """Initial browse fetch."""
        await self.fetch_books(1)

    def set_query(self, text: str):
        """Record typed text; the search runs after the debounce interval."""
        self.query = text
        self._debouncer(text)
        self._notify()

    def _commit_query(self, text: str):
        if text == self.active_query:
            return
        self.active_query = text
        self._spawn(self.fetch_books(1))

    async def set_filter(self, key: str, value: str):
        """
        Change one filter and reload the first page.

        Raises:
            ValueError: unknown filter key or subject
        """
        if key not in FILTER_KEYS:
            raise ValueError(f"Unknown filter: {key}")
        if key == "subject" and value not in Config().SUBJECTS:
            raise ValueError(f"Unknown subject: {value}")

        filters = replace(self.filters, **{key: value})
        if filters == self.filters:
            return
        self.filters = filters
        await self.fetch_books(1)

    async def clear_filters(self):
        """Reset subject and language to their defaults and reload page 1."""
        self.filters = Filters()
        await self.fetch_books(1)

    async def request_page(self, page: int) -> bool:
        """
        Navigate to a page.

        Returns:
            False (and nothing is fetched) when the page is out of range
        """
        if not 1 <= page <= self.total_pages:
            logger.warning(f"Ignoring page {page}, valid range is 1-{self.total_pages}")
            return False
        await self.fetch_books(page)
        return True

    async def retry(self):
        """Re-issue the last search exactly as it was sent."""
        if self._last_request is None:
            await self.fetch_books(1)
            return
        await self._fetch(*self._last_request)

    async def fetch_books(self, page: int = 1):
        """Search the committed query and current filters at ``page``."""
        await self._fetch(self.active_query, page, self.filters)

    async def _fetch(self, query: str, page: int, filters: Filters):
        self._request_seq += 1
        seq = self._request_seq
        self._last_request = (query, page, filters)

        self.status = Status.LOADING
        self.error = None
        self._notify()

        try:
            result = await self.client.search(
                query,
                offset_for_page(page, self.page_size),
                self.page_size,
                filters
            )
        except BookServiceError as e:
            if seq != self._request_seq:
                logger.info(f"Discarding failure of superseded request #{seq}")
                return
            logger.error(f"Search failed: {e}")
            self.status = Status.ERROR
            self.error = str(e)
            # Never show stale results next to an error
            self.books = []
            self.total_items = 0
            self._notify()
            return

        if seq != self._request_seq:
            logger.info(f"Discarding response of superseded request #{seq}")
            return

        self.books = result.books
        self.total_items = result.total_items
        self.current_page = page
        self.status = Status.SUCCESS
        self._notify()

    # Detail

    async def select_book(self, book_id: str):
        """Load detail for one book without touching the result list."""
        self._detail_seq += 1
        seq = self._detail_seq

        self.selected_book_id = book_id
        self.detail_status = DetailStatus.LOADING
        self.detail = None
        self.detail_error = None
        self._notify()

        try:
            detail = await self.client.get_details(book_id)
        except BookServiceError as e:
            logger.error(f"Error fetching book details for {book_id}: {e}")
            if seq != self._detail_seq:
                return
            self.detail_status = DetailStatus.LOADED
            self.detail_error = str(e)
            self._notify()
            return

        # Closed or replaced while loading
        if seq != self._detail_seq:
            return

        self.detail = detail
        self.detail_status = DetailStatus.LOADED
        self._notify()

    def clear_selection(self):
        """Close the detail view; a detail response still in flight is dropped."""
        self._detail_seq += 1
        self.selected_book_id = None
        self.detail_status = DetailStatus.NONE
        self.detail = None
        self.detail_error = None
        self._notify()

    def close(self):
        """Drop any pending debounced search."""
        self._debouncer.cancel()
