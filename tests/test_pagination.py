"""
Tests for pagination metadata (pure functions, no database)
"""

import math

import pytest

from models import Metadata
from query.pagination import calculate_metadata, is_out_of_range, last_page_for


class TestCalculateMetadata:
    @pytest.mark.parametrize("total,page_size", [
        (1, 1), (1, 4), (4, 4), (5, 4), (8, 4), (9, 4), (99, 10), (100, 10), (10_001, 7),
    ])
    def test_last_page_is_ceiling(self, total, page_size):
        metadata = calculate_metadata(total, 1, page_size)
        assert metadata.last_page == math.ceil(total / page_size)

    @pytest.mark.parametrize("page", [1, 2, 99, 10_000_000])
    def test_current_page_is_reported_as_given(self, page):
        metadata = calculate_metadata(12, page, 4)
        assert metadata.current_page == page
        assert metadata.first_page == 1
        assert metadata.page_size == 4
        assert metadata.total_records == 12

    @pytest.mark.parametrize("page,page_size", [(1, 4), (99, 4), (3, 50)])
    def test_zero_total_is_empty_metadata(self, page, page_size):
        metadata = calculate_metadata(0, page, page_size)
        assert metadata == Metadata.empty()
        assert metadata.is_empty
        assert metadata.current_page == 0
        assert metadata.first_page == 0
        assert metadata.last_page == 0
        assert metadata.page_size == 0


class TestOutOfRange:
    def test_page_past_last_page(self):
        metadata = calculate_metadata(4, 99, 4)
        assert metadata.last_page == 1
        assert is_out_of_range(metadata, 99)

    def test_last_page_is_in_range(self):
        metadata = calculate_metadata(9, 3, 4)
        assert not is_out_of_range(metadata, 3)

    def test_empty_result_is_never_out_of_range(self):
        assert not is_out_of_range(Metadata.empty(), 5)


def test_last_page_for_exact_multiple():
    assert last_page_for(8, 4) == 2
    assert last_page_for(0, 4) == 0
