"""Tests for page arithmetic."""
import pytest

from bookfinder.pagination import offset_for_page, paginate


@pytest.mark.parametrize("page_size", [1, 5, 12, 40])
def test_paginate_boundaries(page_size):
    """Exact multiples fill a page; one more item starts the next."""
    assert paginate(0, page_size, 50) == 0
    assert paginate(page_size, page_size, 50) == 1
    assert paginate(page_size + 1, page_size, 50) == 2


def test_paginate_respects_ceiling():
    """Page count never exceeds the ceiling."""
    assert paginate(1_000_000, 12, 50) == 50
    assert paginate(600, 12, 50) == 50
    assert paginate(601, 12, 50) == 50
    assert paginate(599, 12, 50) == 50
    assert paginate(588, 12, 50) == 49


def test_paginate_defaults():
    """Session defaults are 12 per page and 50 pages."""
    assert paginate(13) == 2
    assert paginate(10_000) == 50


def test_offset_for_page():
    """Offsets are zero-based and step by the page size."""
    assert offset_for_page(1, 12) == 0
    assert offset_for_page(3, 12) == 24
