"""Data models for books."""
from dataclasses import dataclass, field
from typing import Optional, List, Union

from bookfinder.config import Config

# Placeholders for fields the upstream record leaves out
NOT_AVAILABLE = "N/A"
UNTITLED = "Untitled"
UNKNOWN_AUTHOR = "Unknown Author"
NO_DESCRIPTION = "No description available"
GENERAL_CATEGORY = "General"
UNKNOWN_PUBLISHER = "Unknown Publisher"
VARIOUS_PUBLISHERS = "Various Publishers"
UNKNOWN_EDITION_PUBLISHER = "Unknown"


@dataclass(frozen=True)
class ImageLinks:
    """Cover image references, either may be missing."""
    thumbnail: Optional[str] = None
    large: Optional[str] = None


@dataclass
class Book:
    """Normalized book representation."""
    id: str
    title: str = UNTITLED
    authors: List[str] = field(default_factory=lambda: [UNKNOWN_AUTHOR])
    published_date: str = NOT_AVAILABLE
    description: str = NO_DESCRIPTION
    image_links: ImageLinks = field(default_factory=ImageLinks)
    page_count: Union[int, str] = NOT_AVAILABLE
    categories: List[str] = field(default_factory=lambda: [GENERAL_CATEGORY])
    average_rating: float = 0
    ratings_count: int = 0
    publisher: str = UNKNOWN_PUBLISHER
    language: str = Config.DEFAULT_LANGUAGE
    isbn: Optional[str] = None
    preview_link: Optional[str] = None

    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.authors)

    @property
    def categories_str(self) -> str:
        """Format categories as comma-separated string."""
        return ", ".join(self.categories)

    @property
    def has_rating(self) -> bool:
        """True for a positive average. 0 means unrated or rated zero."""
        return self.average_rating > 0

    @property
    def cover(self) -> Optional[str]:
        """Best available cover image, large first."""
        return self.image_links.large or self.image_links.thumbnail


@dataclass(frozen=True)
class Filters:
    """Active search filters. Replaced as a whole, never mutated."""
    subject: str = Config.DEFAULT_SUBJECT
    language: str = Config.DEFAULT_LANGUAGE

    @property
    def is_default(self) -> bool:
        """Both filters are at their session defaults."""
        return self.subject == Config.DEFAULT_SUBJECT and self.language == Config.DEFAULT_LANGUAGE


@dataclass
class SearchResultPage:
    """One page of search results plus the upstream total."""
    books: List[Book] = field(default_factory=list)
    total_items: int = 0

    def __len__(self) -> int:
        """Number of books on this page."""
        return len(self.books)
