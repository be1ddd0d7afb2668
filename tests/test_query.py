"""Tests for search request normalization."""
import pytest

from bookfinder.models import Filters
from bookfinder.query import SEARCH_FIELDS, build_search_request


@pytest.mark.parametrize("offset,limit,page", [(0, 12, 1), (12, 12, 2), (24, 12, 3), (40, 20, 3)])
def test_offset_to_page(offset, limit, page):
    """Zero-based offsets map to 1-based pages."""
    assert build_search_request("dune", offset, limit).page == page


@pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
def test_blank_query_uses_default_term(raw):
    assert build_search_request(raw, 0, 12).query == "bestseller"


def test_query_is_trimmed():
    assert build_search_request("  dune  ", 0, 12).query == "dune"


def test_default_filters_are_omitted():
    request = build_search_request("dune", 0, 12, Filters(subject="all", language="en"))
    params = request.to_params()

    assert "subject" not in params
    assert "language" not in params


def test_non_default_filters_are_sent():
    params = build_search_request("dune", 0, 12, Filters(subject="fiction", language="fre")).to_params()

    assert params["subject"] == "fiction"
    assert params["language"] == "fre"


def test_to_params_shape():
    params = build_search_request("", 0, 12, Filters()).to_params()

    assert params == {
        "q": "bestseller",
        "page": "1",
        "limit": "12",
        "fields": SEARCH_FIELDS,
    }
    assert "first_sentence" in SEARCH_FIELDS.split(",")
