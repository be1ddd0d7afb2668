"""Async HTTP client for the Open Library API."""
import asyncio
import httpx
from typing import List, Optional, Dict, Any
import logging

from bookfinder.config import Config
from bookfinder.errors import (
    BookServiceError,
    TransportError,
    UpstreamStatusError,
    GENERIC_DETAILS_MESSAGE,
    GENERIC_SEARCH_MESSAGE,
)
from bookfinder.models import Book, Filters, SearchResultPage, UNKNOWN_AUTHOR
from bookfinder.parse import (
    parse_books_response,
    parse_edition,
    parse_work,
    work_author_keys,
)
from bookfinder.query import build_search_request

logger = logging.getLogger(__name__)


def normalize_book_path(book_id: str) -> str:
    """Path form of a book id with exactly one leading slash."""
    return "/" + book_id.strip().lstrip("/")


class AsyncOpenLibraryClient:
    """Async client for book search and detail lookups."""

    def __init__(
        self,
        base_url: str = Config.OPENLIBRARY_BASE_URL,
        timeout: int = Config.DEFAULT_TIMEOUT,
        max_concurrent: int = Config.MAX_CONCURRENT_REQUESTS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: API root
            timeout: Request timeout in seconds
            max_concurrent: Maximum concurrent requests
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.semaphore = asyncio.Semaphore(max_concurrent)

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            follow_redirects=True,
            transport=transport
        )

    async def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None,
        failure_message: str = GENERIC_SEARCH_MESSAGE
    ) -> Any:
        """
        GET a path and decode the JSON body.

        Raises:
            UpstreamStatusError: non-success status
            TransportError: network, timeout or decode failure
        """
        async with self.semaphore:
            try:
                logger.info(f"Async request: {path} {params or ''}")
                response = await self.client.get(path, params=params)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.error(f"Async request to {path} failed: {e}")
                raise TransportError(failure_message) from e

        if not response.is_success:
            logger.warning(f"Status {response.status_code} for {path}")
            raise UpstreamStatusError(response.status_code, response.reason_phrase)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {path}: {e}")
            raise TransportError(failure_message) from e

    async def search(
        self,
        query: str,
        offset: int = 0,
        limit: int = Config.BOOKS_PER_PAGE,
        filters: Optional[Filters] = None
    ) -> SearchResultPage:
        """
        Search for books.

        Args:
            query: Raw search text (blank browses the default term)
            offset: Zero-based offset, a multiple of ``limit``
            limit: Results per page
            filters: Subject and language filters

        Returns:
            SearchResultPage with transformed books and the upstream total
        """
        request = build_search_request(query, offset, limit, filters)
        payload = await self._get_json("/search.json", params=request.to_params())

        page = parse_books_response(payload)
        logger.info(f"Found {page.total_items} books for '{request.query}' (page {request.page})")
        return page

    async def _author_name(self, key: Optional[str]) -> str:
        """Resolve one author path, degrading to the placeholder on any failure."""
        if not key:
            return UNKNOWN_AUTHOR
        try:
            data = await self._get_json(f"{normalize_book_path(key)}.json")
        except BookServiceError as e:
            logger.warning(f"Author lookup {key} failed: {e}")
            return UNKNOWN_AUTHOR

        name = data.get("name") if isinstance(data, dict) else None
        if isinstance(name, str) and name.strip():
            return name
        return UNKNOWN_AUTHOR

    async def get_details(self, book_id: str) -> Book:
        """
        Fetch a works record and resolve its author names.

        Author lookups run concurrently; a failed lookup becomes
        "Unknown Author" instead of failing the whole call.

        Args:
            book_id: Works key, with or without the leading slash

        Returns:
            Detail Book
        """
        path = normalize_book_path(book_id)
        work = await self._get_json(f"{path}.json", failure_message=GENERIC_DETAILS_MESSAGE)

        keys = work_author_keys(work)
        names = await asyncio.gather(*[self._author_name(key) for key in keys])

        return parse_work(work, list(names), book_id=path)

    async def search_by_author(
        self,
        author_name: str,
        limit: int = Config.BOOKS_PER_PAGE
    ) -> List[Book]:
        """
        Search books by author name.

        Returns:
            List of books (empty on any failure)
        """
        params = {"author": author_name, "limit": str(limit)}
        try:
            payload = await self._get_json("/search.json", params=params)
        except BookServiceError as e:
            logger.error(f"Author search failed for '{author_name}': {e}")
            return []

        return parse_books_response(payload).books

    async def search_by_isbn(self, isbn: str) -> Optional[Book]:
        """
        Look up a single edition by ISBN.

        Returns:
            Book or None if the edition was not found or the request failed
        """
        isbn = isbn.replace("-", "").strip()
        try:
            edition = await self._get_json(f"/isbn/{isbn}.json")
        except BookServiceError as e:
            logger.warning(f"ISBN lookup failed for {isbn}: {e}")
            return None

        return parse_edition(edition, isbn)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
