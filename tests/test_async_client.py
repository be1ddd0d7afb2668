"""Tests for the async Open Library client."""
import asyncio

import httpx
import pytest

from bookfinder.async_client import AsyncOpenLibraryClient, normalize_book_path
from bookfinder.errors import TransportError, UpstreamStatusError
from bookfinder.models import Filters, UNKNOWN_AUTHOR


def make_client(handler):
    return AsyncOpenLibraryClient(transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("raw,expected", [
    ("/works/OL1W", "/works/OL1W"),
    ("works/OL1W", "/works/OL1W"),
    ("//works/OL1W", "/works/OL1W"),
    (" /works/OL1W ", "/works/OL1W"),
])
def test_normalize_book_path(raw, expected):
    assert normalize_book_path(raw) == expected


@pytest.mark.asyncio
async def test_search_default_browse_request(search_response):
    """Blank query asks for the default term, page 1, 12 results, no filters."""
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=search_response)

    async with make_client(handler) as client:
        page = await client.search("", 0, 12, Filters(subject="all", language="en"))

    assert len(seen) == 1
    params = seen[0].url.params
    assert seen[0].url.path == "/search.json"
    assert params["q"] == "bestseller"
    assert params["page"] == "1"
    assert params["limit"] == "12"
    assert "subject" not in params
    assert "language" not in params

    assert page.total_items == 1350
    assert [book.title for book in page.books] == ["Fantastic Mr Fox", "Second"]


@pytest.mark.asyncio
async def test_search_sends_filters_and_page():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"docs": [], "numFound": 0})

    async with make_client(handler) as client:
        await client.search("dune", 24, 12, Filters(subject="science", language="ger"))

    params = seen[0].url.params
    assert params["q"] == "dune"
    assert params["page"] == "3"
    assert params["subject"] == "science"
    assert params["language"] == "ger"


@pytest.mark.asyncio
async def test_search_empty_payload():
    """Missing docs and count give an empty page, not an error."""
    async with make_client(lambda request: httpx.Response(200, json={})) as client:
        page = await client.search("nothing", 0, 12)

    assert page.books == []
    assert page.total_items == 0


@pytest.mark.asyncio
async def test_search_error_status():
    async with make_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(UpstreamStatusError) as exc_info:
            await client.search("dune")

    assert exc_info.value.status_code == 500
    assert exc_info.value.reason == "Internal Server Error"
    assert str(exc_info.value) == "API Error: 500 Internal Server Error"


@pytest.mark.asyncio
async def test_search_network_failure_keeps_cause():
    def handler(request):
        raise httpx.ConnectError("connection reset", request=request)

    async with make_client(handler) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.search("dune")

    assert str(exc_info.value) == "Failed to fetch books from Open Library. Please try again."
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert "connection reset" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_search_invalid_json():
    async with make_client(lambda request: httpx.Response(200, content=b"<html>")) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.search("dune")

    assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.asyncio
async def test_get_details_resolves_authors_in_order(work_record):
    """Slow first author still comes first; a failed lookup degrades."""
    work_record["authors"].append({"author": {"key": "/authors/OL3A"}})
    requested = []

    async def handler(request):
        path = request.url.path
        requested.append(path)
        if path == "/works/OL45804W.json":
            return httpx.Response(200, json=work_record)
        if path == "/authors/OL34184A.json":
            await asyncio.sleep(0.05)
            return httpx.Response(200, json={"name": "Roald Dahl"})
        if path == "/authors/OL2A.json":
            return httpx.Response(503)
        if path == "/authors/OL3A.json":
            return httpx.Response(200, json={"personal_name": "no name field"})
        return httpx.Response(404)

    async with make_client(handler) as client:
        book = await client.get_details("works/OL45804W")

    assert requested[0] == "/works/OL45804W.json"
    assert book.id == "/works/OL45804W"
    assert book.authors == ["Roald Dahl", UNKNOWN_AUTHOR, UNKNOWN_AUTHOR]
    assert book.description == "Three farmers try to catch a fox."
    assert book.publisher == "Various Publishers"


@pytest.mark.asyncio
async def test_get_details_author_lookups_overlap(work_record):
    """Every author request is in flight before any of them answers."""
    started = []
    all_started = asyncio.Event()

    async def handler(request):
        path = request.url.path
        if path.startswith("/authors/"):
            started.append(path)
            if len(started) == 2:
                all_started.set()
            # A one-at-a-time loop would never reach the second request
            await asyncio.wait_for(all_started.wait(), timeout=1)
            return httpx.Response(200, json={"name": path.split("/")[-1][:-5]})
        return httpx.Response(200, json=work_record)

    async with make_client(handler) as client:
        book = await client.get_details("/works/OL45804W")

    assert sorted(started) == ["/authors/OL2A.json", "/authors/OL34184A.json"]
    assert book.authors == ["OL34184A", "OL2A"]


@pytest.mark.asyncio
async def test_get_details_malformed_author_key():
    """An author key that cannot form a URL degrades like any other failure."""
    work = {
        "key": "/works/OL1W",
        "title": "Broken reference",
        "authors": [
            {"author": {"key": "/authors/OL1A"}},
            {"author": {"key": "/authors/OL\x01BAD"}},
        ],
    }

    def handler(request):
        if request.url.path == "/authors/OL1A.json":
            return httpx.Response(200, json={"name": "Good"})
        return httpx.Response(200, json=work)

    async with make_client(handler) as client:
        book = await client.get_details("/works/OL1W")

    assert book.authors == ["Good", UNKNOWN_AUTHOR]


@pytest.mark.asyncio
async def test_get_details_author_network_failure(work_record):
    def handler(request):
        if request.url.path.startswith("/authors/"):
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, json=work_record)

    async with make_client(handler) as client:
        book = await client.get_details("/works/OL45804W")

    assert book.authors == [UNKNOWN_AUTHOR, UNKNOWN_AUTHOR]


@pytest.mark.asyncio
async def test_get_details_without_authors():
    work = {"key": "/works/OL1W", "title": "Solo", "description": "Plain text"}

    async with make_client(lambda request: httpx.Response(200, json=work)) as client:
        book = await client.get_details("/works/OL1W")

    assert book.authors == [UNKNOWN_AUTHOR]
    assert book.description == "Plain text"


@pytest.mark.asyncio
async def test_get_details_not_found():
    async with make_client(lambda request: httpx.Response(404)) as client:
        with pytest.raises(UpstreamStatusError) as exc_info:
            await client.get_details("/works/OL0W")

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_search_by_author(search_response):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=search_response)

    async with make_client(handler) as client:
        books = await client.search_by_author("Roald Dahl", limit=5)

    assert seen[0].url.params["author"] == "Roald Dahl"
    assert seen[0].url.params["limit"] == "5"
    assert books[0].authors == ["Roald Dahl"]


@pytest.mark.asyncio
async def test_search_by_author_ignores_non_list_docs():
    """A dict where the docs list should be yields no books."""
    payload = {"docs": {"key": "/works/OL1W", "title": "Not a list"}, "numFound": 1}

    async with make_client(lambda request: httpx.Response(200, json=payload)) as client:
        assert await client.search_by_author("Roald Dahl") == []


@pytest.mark.asyncio
async def test_search_by_author_failure_returns_empty():
    async with make_client(lambda request: httpx.Response(500)) as client:
        assert await client.search_by_author("Nobody") == []


@pytest.mark.asyncio
async def test_search_by_isbn():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"key": "/books/OL1M", "title": "Edition", "publishers": ["Puffin"]})

    async with make_client(handler) as client:
        book = await client.search_by_isbn("978-0-14-032872-1")

    assert seen == ["/isbn/9780140328721.json"]
    assert book.isbn == "9780140328721"
    assert book.publisher == "Puffin"


@pytest.mark.asyncio
async def test_search_by_isbn_not_found():
    async with make_client(lambda request: httpx.Response(404)) as client:
        assert await client.search_by_isbn("0000000000") is None
