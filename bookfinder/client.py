"""HTTP client for the Open Library API with resilience patterns."""
import time
import random
import requests
from typing import Optional, Dict, Any, List
import logging

from bookfinder.config import Config
from bookfinder.errors import BookServiceError, TransportError, UpstreamStatusError
from bookfinder.models import Book, Filters, SearchResultPage
from bookfinder.parse import parse_books_response, parse_edition
from bookfinder.query import build_search_request

logger = logging.getLogger(__name__)


class OpenLibraryClient:
    """Blocking client for Open Library search with timeouts and optional retries."""

    def __init__(
        self,
        base_url: str = Config.OPENLIBRARY_BASE_URL,
        timeout: int = Config.DEFAULT_TIMEOUT,
        max_retries: int = Config.DEFAULT_MAX_RETRIES,
        base_backoff: float = 1.0
    ):
        """
        Initialize Open Library client.

        Args:
            base_url: API root
            timeout: Request timeout in seconds
            max_retries: Total attempts per request (1 disables retrying)
            base_backoff: Base delay for exponential backoff
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_backoff = base_backoff

        # Create session for connection pooling
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def search(
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
        payload = self._make_request_with_retry(
            f"{self.base_url}/search.json",
            request.to_params()
        )
        return parse_books_response(payload)

    def search_by_author(self, author_name: str, limit: int = Config.BOOKS_PER_PAGE) -> List[Book]:
        """
        Search books by author name.

        Returns:
            List of books (empty on any failure)
        """
        params = {"author": author_name, "limit": str(limit)}
        try:
            payload = self._make_request_with_retry(f"{self.base_url}/search.json", params)
        except BookServiceError as e:
            logger.error(f"Author search failed for '{author_name}': {e}")
            return []

        return parse_books_response(payload).books

    def search_by_isbn(self, isbn: str) -> Optional[Book]:
        """
        Look up a single edition by ISBN.

        Returns:
            Book or None if the edition was not found or the request failed
        """
        isbn = isbn.replace("-", "").strip()
        try:
            edition = self._make_request_with_retry(f"{self.base_url}/isbn/{isbn}.json")
        except BookServiceError as e:
            logger.warning(f"ISBN lookup failed for {isbn}: {e}")
            return None
        return parse_edition(edition, isbn)

    def _make_request_with_retry(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Make HTTP request with retry logic.

        Args:
            url: Request URL
            params: Query parameters

        Returns:
            Decoded response JSON

        Raises:
            UpstreamStatusError: non-success status after the last attempt
            TransportError: network or decode failure after the last attempt
        """
        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                logger.info(f"Request attempt {attempt + 1}/{self.max_retries}: {url}")

                response = self.session.get(
                    url,
                    params=params,
                    timeout=self.timeout
                )

                if response.ok:
                    logger.info(f"Success: {response.status_code}")
                    return response.json()

                error = UpstreamStatusError(response.status_code, response.reason)

                if response.status_code == 429 or response.status_code >= 500:
                    # Rate limited or server error - retryable
                    logger.warning(f"Status {response.status_code} on attempt {attempt + 1}")
                    if not last_attempt:
                        self._backoff(attempt)
                        continue
                else:
                    # Client error - don't retry
                    logger.error(f"Client error ({response.status_code}) for {url}")

                raise error

            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                logger.warning(f"{type(e).__name__} on attempt {attempt + 1}: {e}")
                if not last_attempt:
                    self._backoff(attempt)
                    continue
                raise TransportError() from e

            except ValueError as e:
                # requests' JSONDecodeError subclasses ValueError
                logger.error(f"Invalid JSON from {url}: {e}")
                raise TransportError() from e

            except requests.exceptions.RequestException as e:
                logger.error(f"Unexpected request error: {e}")
                raise TransportError() from e

        # max_retries >= 1, the loop always returns or raises
        raise TransportError()

    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.

        Args:
            attempt: Current attempt number (0-indexed)
        """
        # Exponential backoff: base * 2^attempt
        delay = self.base_backoff * (2 ** attempt)

        # Add jitter: random value between 0 and delay
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter

        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
