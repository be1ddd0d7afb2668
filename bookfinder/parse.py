"""Parse and normalize Open Library API responses.

Everything the API sends is optional. The functions here are the only place
that looks at raw documents; they always return a fully populated ``Book``
and never raise on missing or mistyped fields.
"""
import hashlib
import logging
from typing import Dict, Any, List, Optional

from bookfinder.config import Config
from bookfinder.models import (
    Book,
    ImageLinks,
    SearchResultPage,
    NOT_AVAILABLE,
    UNTITLED,
    UNKNOWN_AUTHOR,
    NO_DESCRIPTION,
    GENERAL_CATEGORY,
    UNKNOWN_PUBLISHER,
    VARIOUS_PUBLISHERS,
    UNKNOWN_EDITION_PUBLISHER,
)

logger = logging.getLogger(__name__)

SEARCH_CATEGORY_LIMIT = 3
DETAIL_CATEGORY_LIMIT = 5


def _text(value: Any) -> Optional[str]:
    """Non-empty string or None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def _strings(value: Any) -> List[str]:
    """Coerce a scalar-or-list field into a list of non-empty strings."""
    if isinstance(value, (list, tuple)):
        return [item for item in value if _text(item)]
    if _text(value):
        return [value]
    return []


def _first(value: Any) -> Optional[str]:
    """First non-empty string of a scalar-or-list field."""
    items = _strings(value)
    return items[0] if items else None


def _positive_int(value: Any) -> Optional[int]:
    """The value if it is a positive int (bools excluded), else None."""
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return None


def _number(value: Any) -> float:
    """Numeric value, or 0 for anything non-numeric."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return 0


def cover_links(cover_id: Any) -> ImageLinks:
    """Medium and large cover URLs for a numeric cover id."""
    if _positive_int(cover_id) is None:
        return ImageLinks()
    base = Config.OPENLIBRARY_COVERS_URL
    return ImageLinks(
        thumbnail=f"{base}/{cover_id}-M.jpg",
        large=f"{base}/{cover_id}-L.jpg"
    )


def preview_link(key: Optional[str]) -> Optional[str]:
    """Open Library page URL for a work or edition key."""
    if not key:
        return None
    return f"{Config.OPENLIBRARY_BASE_URL}{key}"


def fallback_id(title: str, authors: List[str], published: str) -> str:
    """
    Stable id for records that carry no key.

    Derived from the visible fields, so the same record gets the same id on
    every request. Two different records with identical title, authors and
    year share an id.
    """
    digest = hashlib.sha1(
        "|".join([title, ",".join(authors), published]).encode("utf-8")
    ).hexdigest()
    return f"ol-{digest[:16]}"


def description_text(value: Any, default: str = NO_DESCRIPTION) -> str:
    """
    Plain text from a description field.

    Open Library sends either a bare string or ``{"type": ..., "value": ...}``.
    """
    if isinstance(value, dict):
        value = value.get("value")
    return _text(value) or default


def _first_sentence(value: Any) -> str:
    sentences = _strings(value)
    if not sentences:
        return NO_DESCRIPTION
    return " ".join(sentences)


def parse_book(doc: Dict[str, Any]) -> Book:
    """
    Parse a single document from the search endpoint.

    Args:
        doc: One entry of the ``docs`` list

    Returns:
        Book with every missing field defaulted
    """
    if not isinstance(doc, dict):
        doc = {}

    title = _text(doc.get("title")) or UNTITLED
    authors = _strings(doc.get("author_name")) or [UNKNOWN_AUTHOR]

    year = doc.get("first_publish_year")
    if isinstance(year, int) and not isinstance(year, bool):
        published_date = str(year)
    else:
        published_date = _text(year) or NOT_AVAILABLE

    key = _text(doc.get("key"))
    book_id = key or _text(doc.get("cover_edition_key"))
    if not book_id:
        book_id = fallback_id(title, authors, published_date)
        logger.debug(f"No key for '{title}', using {book_id}")

    categories = _strings(doc.get("subject"))[:SEARCH_CATEGORY_LIMIT]

    return Book(
        id=book_id,
        title=title,
        authors=authors,
        published_date=published_date,
        description=_first_sentence(doc.get("first_sentence")),
        image_links=cover_links(doc.get("cover_i")),
        page_count=_positive_int(doc.get("number_of_pages_median")) or NOT_AVAILABLE,
        categories=categories or [GENERAL_CATEGORY],
        average_rating=_number(doc.get("ratings_average")),
        ratings_count=_positive_int(doc.get("ratings_count")) or 0,
        publisher=_first(doc.get("publisher")) or UNKNOWN_PUBLISHER,
        language=_first(doc.get("language")) or Config.DEFAULT_LANGUAGE,
        isbn=_first(doc.get("isbn")),
        preview_link=preview_link(key)
    )


def parse_books_response(response_json: Dict[str, Any]) -> SearchResultPage:
    """
    Parse full search response.

    Args:
        response_json: Complete API response JSON

    Returns:
        SearchResultPage (empty if no docs were found)
    """
    if not isinstance(response_json, dict):
        return SearchResultPage()

    docs = response_json.get("docs")
    if not isinstance(docs, list):
        docs = []

    total = response_json.get("numFound")
    if not isinstance(total, int) or isinstance(total, bool) or total < 0:
        total = 0

    return SearchResultPage(
        books=[parse_book(doc) for doc in docs],
        total_items=total
    )


def work_author_keys(work: Dict[str, Any]) -> List[Optional[str]]:
    """
    Author paths referenced by a works record, in order.

    Malformed references stay in the list as ``None`` so that the resolved
    names line up with the original entries.
    """
    entries = work.get("authors") if isinstance(work, dict) else None
    if not isinstance(entries, list):
        return []

    keys = []
    for entry in entries:
        author = entry.get("author") if isinstance(entry, dict) else None
        key = author.get("key") if isinstance(author, dict) else None
        keys.append(_text(key))
    return keys


def parse_work(
    work: Dict[str, Any],
    author_names: Optional[List[str]] = None,
    book_id: Optional[str] = None
) -> Book:
    """Parse a works record into a detail Book."""
    if not isinstance(work, dict):
        work = {}

    key = _text(work.get("key")) or book_id
    title = _text(work.get("title")) or UNTITLED
    authors = [name for name in (author_names or []) if _text(name)] or [UNKNOWN_AUTHOR]
    published_date = _text(work.get("first_publish_date")) or NOT_AVAILABLE

    covers = work.get("covers")
    cover_id = covers[0] if isinstance(covers, list) and covers else None

    categories = _strings(work.get("subjects"))[:DETAIL_CATEGORY_LIMIT]

    # Works records carry no page count, rating or single publisher
    return Book(
        id=key or fallback_id(title, authors, published_date),
        title=title,
        authors=authors,
        published_date=published_date,
        description=description_text(work.get("description")),
        image_links=cover_links(cover_id),
        page_count=NOT_AVAILABLE,
        categories=categories or [GENERAL_CATEGORY],
        average_rating=0,
        ratings_count=0,
        publisher=VARIOUS_PUBLISHERS,
        language=Config.DEFAULT_LANGUAGE,
        preview_link=preview_link(key)
    )


def parse_edition(edition: Dict[str, Any], isbn: str) -> Book:
    """Parse an edition record returned by an ISBN lookup."""
    if not isinstance(edition, dict):
        edition = {}

    title = _text(edition.get("title")) or UNTITLED

    authors = []
    entries = edition.get("authors")
    if isinstance(entries, list):
        for entry in entries:
            name = entry.get("name") if isinstance(entry, dict) else None
            authors.append(_text(name) or UNKNOWN_AUTHOR)

    published_date = _text(edition.get("publish_date")) or NOT_AVAILABLE
    key = _text(edition.get("key"))

    covers = edition.get("covers")
    cover_id = covers[0] if isinstance(covers, list) and covers else None

    authors = authors or [UNKNOWN_AUTHOR]

    return Book(
        id=key or fallback_id(title, authors, published_date),
        title=title,
        authors=authors,
        published_date=published_date,
        description=description_text(edition.get("description")),
        image_links=ImageLinks(thumbnail=cover_links(cover_id).thumbnail),
        page_count=_positive_int(edition.get("number_of_pages")) or NOT_AVAILABLE,
        publisher=_first(edition.get("publishers")) or UNKNOWN_EDITION_PUBLISHER,
        isbn=isbn,
        preview_link=preview_link(key)
    )
