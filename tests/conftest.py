"""Shared fixtures: sample Open Library payloads."""
import pytest


@pytest.fixture
def search_doc():
    """A search document with every field the app reads."""
    return {
        "key": "/works/OL45804W",
        "title": "Fantastic Mr Fox",
        "author_name": ["Roald Dahl"],
        "first_publish_year": 1970,
        "number_of_pages_median": 96,
        "cover_i": 6498519,
        "isbn": ["9780140328721", "0140328726"],
        "publisher": ["Puffin", "Knopf"],
        "language": ["eng", "spa"],
        "subject": ["Foxes", "Animals", "Farmers", "Juvenile fiction"],
        "ratings_average": 4.1,
        "ratings_count": 212,
        "first_sentence": ["Down in the valley there were three farms.", "The owners were rich."],
        "cover_edition_key": "OL7353617M",
    }


@pytest.fixture
def search_response(search_doc):
    return {
        "numFound": 1350,
        "start": 0,
        "docs": [search_doc, {"key": "/works/OL2W", "title": "Second"}],
    }


@pytest.fixture
def work_record():
    return {
        "key": "/works/OL45804W",
        "title": "Fantastic Mr Fox",
        "description": {"type": "/type/text", "value": "Three farmers try to catch a fox."},
        "covers": [6498519, 8904777],
        "subjects": ["Foxes", "Animals", "Farmers", "Fiction", "Humor", "Juvenile"],
        "first_publish_date": "October 1, 1974",
        "authors": [
            {"author": {"key": "/authors/OL34184A"}, "type": {"key": "/type/author_role"}},
            {"author": {"key": "/authors/OL2A"}, "type": {"key": "/type/author_role"}},
        ],
    }
