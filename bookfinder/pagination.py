"""Page arithmetic for search results."""
from bookfinder.config import Config


def paginate(
    total_items: int,
    page_size: int = Config.BOOKS_PER_PAGE,
    page_ceiling: int = Config.MAX_PAGES
) -> int:
    """
    Number of reachable pages.

    Args:
        total_items: Upstream result count
        page_size: Results per page (> 0)
        page_ceiling: Hard cap on the page count

    Returns:
        min(ceil(total_items / page_size), page_ceiling)
    """
    if total_items <= 0:
        return 0
    pages = (total_items + page_size - 1) // page_size
    return min(pages, page_ceiling)


def offset_for_page(page: int, page_size: int = Config.BOOKS_PER_PAGE) -> int:
    """Zero-based offset of the first result on a 1-based page."""
    return (page - 1) * page_size

