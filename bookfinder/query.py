"""Build outbound search requests from user input."""
from dataclasses import dataclass
from typing import Dict, Optional

from bookfinder.config import Config
from bookfinder.models import Filters

SEARCH_FIELDS = ",".join([
    "key",
    "title",
    "author_name",
    "first_publish_year",
    "number_of_pages_median",
    "cover_i",
    "isbn",
    "publisher",
    "language",
    "subject",
    "ratings_average",
    "ratings_count",
    "first_sentence",
    "cover_edition_key",
])


@dataclass(frozen=True)
class SearchRequest:
    """Normalized search request, ready to be sent."""
    query: str
    page: int
    limit: int
    subject: Optional[str] = None
    language: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        """Query-string parameters for the search endpoint."""
        params = {
            "q": self.query,
            "page": str(self.page),
            "limit": str(self.limit),
            "fields": SEARCH_FIELDS
        }

        if self.subject:
            params["subject"] = self.subject
        if self.language:
            params["language"] = self.language

        return params


def build_search_request(
    raw_query: Optional[str],
    offset: int = 0,
    limit: int = Config.BOOKS_PER_PAGE,
    filters: Optional[Filters] = None
) -> SearchRequest:
    """
    Turn raw user input into a search request.

    Args:
        raw_query: Text typed by the user, possibly blank
        offset: Zero-based result offset, a multiple of ``limit``
        limit: Page size
        filters: Active filters (defaults when omitted)

    Returns:
        SearchRequest with a 1-based page number
    """
    filters = filters or Filters()

    query = (raw_query or "").strip() or Config.DEFAULT_QUERY

    # The API pages from 1
    page = offset // limit + 1

    subject = filters.subject if filters.subject and filters.subject != Config.DEFAULT_SUBJECT else None
    language = filters.language if filters.language and filters.language != Config.DEFAULT_LANGUAGE else None

    return SearchRequest(
        query=query,
        page=page,
        limit=limit,
        subject=subject,
        language=language
    )
