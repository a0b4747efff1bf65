import pytest

from printhub.engine.page_range import resolve_page_range, resolve_page_range_with_trace


@pytest.mark.parametrize("expression", [None, "", "   ", "all", "ALL", " All "])
def test_all_pages_selected(expression):
    """Missing, blank and 'all' expressions select every page."""
    assert resolve_page_range(expression, 5) == [1, 2, 3, 4, 5]


def test_mixed_clauses_sorted_and_deduplicated():
    assert resolve_page_range("2-4,7,1-1", 10) == [1, 2, 3, 4, 7]


def test_overlapping_clauses_do_not_duplicate():
    pages = resolve_page_range("5,1-6,3-8,5", 10)
    assert pages == [1, 2, 3, 4, 5, 6, 7, 8]


def test_malformed_clause_dropped_valid_kept():
    assert resolve_page_range("abc,3", 5) == [3]


def test_span_clamped_to_document():
    assert resolve_page_range("0-3", 5) == [1, 2, 3]
    assert resolve_page_range("4-100", 5) == [4, 5]


def test_single_page_outside_document_dropped():
    assert resolve_page_range("0,6,2", 5) == [2]


def test_reversed_span_contributes_nothing():
    assert resolve_page_range("4-2", 5) == []


def test_whitespace_and_empty_clauses():
    assert resolve_page_range(" 1 - 2 , , 4 ", 5) == [1, 2, 4]


def test_chained_hyphens_use_first_two_parts():
    assert resolve_page_range("1-2-3", 5) == [1, 2]


def test_signed_page_numbers_parse():
    assert resolve_page_range("+2", 5) == [2]
    assert resolve_page_range("+2-+4", 5) == [2, 3, 4]


def test_decimals_and_missing_bounds_dropped():
    """Decimals are not page numbers and a span needs both ends."""
    pages, skipped = resolve_page_range_with_trace("1.5,-3,4-", 5)
    assert pages == []
    assert skipped == ["1.5", "-3", "4-"]


def test_nothing_usable_is_empty():
    assert resolve_page_range("x-y,z", 5) == []


def test_zero_page_document():
    assert resolve_page_range("all", 0) == []


def test_skipped_clauses_reported():
    pages, skipped = resolve_page_range_with_trace("1,abc,9,2-3", 5)
    assert pages == [1, 2, 3]
    assert skipped == ["abc", "9"]


@pytest.mark.parametrize("total", [1, 7, 250])
def test_all_matches_full_document(total):
    assert resolve_page_range("all", total) == list(range(1, total + 1))
