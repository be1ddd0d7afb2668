#!/usr/bin/env python3
"""Book Finder CLI - search Open Library from the terminal."""
import argparse
import asyncio
import sys
import json
from dataclasses import asdict
from tabulate import tabulate
from bookfinder.client import OpenLibraryClient
from bookfinder.async_client import AsyncOpenLibraryClient
from bookfinder.config import Config
from bookfinder.errors import BookServiceError
from bookfinder.models import Filters
from bookfinder.pagination import offset_for_page, paginate
import logging

logger = logging.getLogger(__name__)


def setup_logging(config: Config, verbose: bool = False):
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.LOG_LEVEL,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def display_books(books, format_type: str):
    """Display books in specified format."""
    if format_type == "table":
        headers = ["Title", "Authors", "Published", "Pages", "Categories", "Rating"]
        rows = [
            [
                _truncate(book.title, 50),
                _truncate(book.authors_str, 30),
                book.published_date,
                book.page_count,
                _truncate(book.categories_str, 30),
                f"{book.average_rating:.1f}" if book.has_rating else "-"
            ]
            for book in books
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([asdict(book) for book in books], indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.title} - {book.authors_str} [{book.id}]")


def display_details(book):
    """Display a single book with every canonical field."""
    rows = [
        ["ID", book.id],
        ["Title", book.title],
        ["Authors", book.authors_str],
        ["Publisher", book.publisher],
        ["Published", book.published_date],
        ["Pages", book.page_count],
        ["Categories", book.categories_str],
        ["Rating", f"{book.average_rating:.1f} ({book.ratings_count} reviews)" if book.has_rating else "-"],
        ["Language", book.language],
        ["ISBN", book.isbn or "-"],
        ["Cover", book.cover or "-"],
        ["Preview", book.preview_link or "-"],
    ]
    print("\n" + tabulate(rows, tablefmt="grid"))
    print(f"\n{book.description}\n")


def _filters_from_args(args) -> Filters:
    return Filters(subject=args.subject, language=args.language)


def _print_page_footer(page: int, total_items: int):
    total_pages = paginate(total_items)
    if total_pages > 1:
        print(f"\nPage {page} of {total_pages} ({total_items:,} books found)")
    else:
        print(f"\n{total_items:,} books found")


def search_books_sync(args, config: Config):
    """Search for books using sync client."""
    with OpenLibraryClient(
        timeout=config.DEFAULT_TIMEOUT,
        max_retries=args.retries
    ) as client:
        result = client.search(
            args.query,
            offset=offset_for_page(args.page),
            filters=_filters_from_args(args)
        )

    if not result.books:
        print("No books found. Try a different search term or clear the filters.")
        return

    display_books(result.books, args.format)
    _print_page_footer(args.page, result.total_items)


async def search_books_async(args, config: Config):
    """Search for books using async client."""
    async with AsyncOpenLibraryClient(timeout=config.DEFAULT_TIMEOUT) as client:
        result = await client.search(
            args.query,
            offset=offset_for_page(args.page),
            filters=_filters_from_args(args)
        )

    if not result.books:
        print("No books found. Try a different search term or clear the filters.")
        return

    display_books(result.books, args.format)
    _print_page_footer(args.page, result.total_items)


async def show_details(args, config: Config):
    """Show detail for one works key."""
    async with AsyncOpenLibraryClient(timeout=config.DEFAULT_TIMEOUT) as client:
        book = await client.get_details(args.book_id)
    display_details(book)


def search_author(args, config: Config):
    """List books by one author."""
    with OpenLibraryClient(timeout=config.DEFAULT_TIMEOUT, max_retries=args.retries) as client:
        books = client.search_by_author(args.name, limit=args.limit)

    if not books:
        print(f"No books found for author '{args.name}'.")
        return
    display_books(books, args.format)


def search_isbn(args, config: Config):
    """Look up one edition by ISBN."""
    with OpenLibraryClient(timeout=config.DEFAULT_TIMEOUT, max_retries=args.retries) as client:
        book = client.search_by_isbn(args.isbn)

    if book is None:
        print(f"No edition found for ISBN {args.isbn}.")
        return
    display_details(book)


def list_subjects(config: Config):
    """Print the subject filter values."""
    print(tabulate(config.SUBJECT_FILTERS, headers=["Value", "Label"], tablefmt="simple"))


def main():
    """Main CLI entry point."""
    config = Config()

    parser = argparse.ArgumentParser(
        description="Book Finder - Open Library search CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Browse the default list
  %(prog)s search ""

  # Second page of science fiction, async client
  %(prog)s search "dune" --subject fiction --page 2 --async

  # Book detail with resolved authors
  %(prog)s details /works/OL45804W

  # Lookups
  %(prog)s author "Ursula K. Le Guin" --limit 5
  %(prog)s isbn 9780441172719
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search for books")
    search_parser.add_argument("query", help="Search query (blank browses bestsellers)")
    search_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    search_parser.add_argument("--subject", choices=config.SUBJECTS, default=config.DEFAULT_SUBJECT, help="Subject filter")
    search_parser.add_argument("--language", default=config.DEFAULT_LANGUAGE, help="Language code (default: en)")
    search_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    search_parser.add_argument("--retries", type=int, default=config.DEFAULT_MAX_RETRIES, help="Attempts per request")
    search_parser.add_argument("--async", dest="use_async", action="store_true", help="Use async client")

    # Details command
    details_parser = subparsers.add_parser("details", help="Show book details")
    details_parser.add_argument("book_id", help="Works key, e.g. /works/OL45804W")

    # Author command
    author_parser = subparsers.add_parser("author", help="Search books by author")
    author_parser.add_argument("name", help="Author name")
    author_parser.add_argument("--limit", type=int, default=config.BOOKS_PER_PAGE, help="Max results")
    author_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    author_parser.add_argument("--retries", type=int, default=config.DEFAULT_MAX_RETRIES, help="Attempts per request")

    # ISBN command
    isbn_parser = subparsers.add_parser("isbn", help="Look up a book by ISBN")
    isbn_parser.add_argument("isbn", help="ISBN-10 or ISBN-13")
    isbn_parser.add_argument("--retries", type=int, default=config.DEFAULT_MAX_RETRIES, help="Attempts per request")

    subparsers.add_parser("subjects", help="List subject filters")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(config, args.verbose)

    if args.command == "search" and not 1 <= args.page <= config.MAX_PAGES:
        parser.error(f"--page must be between 1 and {config.MAX_PAGES}")

    try:
        if args.command == "search":
            if args.use_async:
                asyncio.run(search_books_async(args, config))
            else:
                search_books_sync(args, config)

        elif args.command == "details":
            asyncio.run(show_details(args, config))

        elif args.command == "author":
            search_author(args, config)

        elif args.command == "isbn":
            search_isbn(args, config)

        elif args.command == "subjects":
            list_subjects(config)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
    except BookServiceError as e:
        logger.error(f"Error: {e}", exc_info=args.verbose)
        print(str(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
