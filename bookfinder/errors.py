"""Exceptions raised by the Open Library clients."""
from typing import Optional

GENERIC_SEARCH_MESSAGE = "Failed to fetch books from Open Library. Please try again."
GENERIC_DETAILS_MESSAGE = "Failed to load book details from Open Library"


class BookServiceError(Exception):
    """
    Base error for failed book lookups.

    ``str(error)`` is safe to show to the end user. The underlying cause,
    when there is one, is chained on ``__cause__`` for diagnostics.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.reason = reason


class UpstreamStatusError(BookServiceError):
    """The API answered with a non-success status."""

    def __init__(self, status_code: int, reason: Optional[str] = None):
        reason = reason or ""
        super().__init__(
            f"API Error: {status_code} {reason}".rstrip(),
            status_code=status_code,
            reason=reason
        )


class TransportError(BookServiceError):
    """Network, timeout or decode failure."""

    def __init__(self, message: str = GENERIC_SEARCH_MESSAGE):
        super().__init__(message)
