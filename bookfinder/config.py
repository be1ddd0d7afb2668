"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # API
    OPENLIBRARY_BASE_URL = os.getenv("OPENLIBRARY_BASE_URL", "https://openlibrary.org")
    OPENLIBRARY_COVERS_URL = os.getenv("OPENLIBRARY_COVERS_URL", "https://covers.openlibrary.org/b/id")

    # Network defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_MAX_RETRIES = int(os.getenv("DEFAULT_MAX_RETRIES", "1"))
    MAX_CONCURRENT_REQUESTS = int(os.getenv("MAX_CONCURRENT_REQUESTS", "5"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Fixed for the whole session, never read from the environment
    BOOKS_PER_PAGE = 12
    MAX_PAGES = 50
    SEARCH_DEBOUNCE_DELAY = 0.6  # seconds

    DEFAULT_QUERY = "bestseller"
    DEFAULT_SUBJECT = "all"
    DEFAULT_LANGUAGE = "en"

    SUBJECT_FILTERS = [
        ("all", "All Subjects"),
        ("fiction", "Fiction"),
        ("science", "Science"),
        ("history", "History"),
        ("biography", "Biography"),
        ("technology", "Technology"),
        ("poetry", "Poetry"),
        ("business", "Business"),
    ]

    @property
    def SUBJECTS(self):
        """Allowed subject filter values."""
        return [value for value, _ in self.SUBJECT_FILTERS]
