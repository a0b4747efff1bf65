"""
Page Range Resolver - Turns a free-text page selection into page numbers.

Supported forms: "all" (or empty), "5", "2-4", and comma-separated mixes
such as "1-3,7,10-12". Pages are 1-indexed. Clauses that cannot be read
are skipped rather than rejected, so a typo in one clause never voids the
rest of the selection.
"""
import logging
from typing import Optional

logger = logging.getLogger(__name__)

ALL_PAGES = "all"


def _parse_int(text: str) -> Optional[int]:
    try:
        return int(text.strip())
    except ValueError:
        return None


def _parse_span(clause: str, total_pages: int) -> Optional[range]:
    """Parse 'start-end'; parts after the second are ignored and the span is clamped to the document."""
    parts = clause.split("-")
    start = _parse_int(parts[0])
    end = _parse_int(parts[1])
    if start is None or end is None:
        return None
    return range(max(1, start), min(total_pages, end) + 1)


def _parse_single(clause: str, total_pages: int) -> Optional[range]:
    page = _parse_int(clause)
    if page is None or not 1 <= page <= total_pages:
        return None
    return range(page, page + 1)


def resolve_page_range_with_trace(expression: Optional[str], total_pages: int) -> tuple[list[int], list[str]]:
    """
    Resolve a page-range expression and report which clauses were ignored.

    Returns (pages, skipped) where pages is ascending and duplicate-free and
    skipped lists the clauses that contributed nothing.
    """
    if total_pages is None or total_pages < 1:
        return [], []

    text = (expression or "").strip()
    if not text or text.lower() == ALL_PAGES:
        return list(range(1, total_pages + 1)), []

    pages: set[int] = set()
    skipped: list[str] = []

    for clause in text.split(","):
        clause = clause.strip()
        if not clause:
            continue

        if "-" in clause:
            contributed = _parse_span(clause, total_pages)
        else:
            contributed = _parse_single(clause, total_pages)

        if not contributed:
            skipped.append(clause)
            continue
        pages.update(contributed)

    if skipped:
        logger.debug("Ignored page range clauses %s for %d-page document", skipped, total_pages)

    return sorted(pages), skipped


def resolve_page_range(expression: Optional[str], total_pages: int) -> list[int]:
    """
    Resolve a page-range expression against a document's page count.

    Args:
        expression: User text such as "all", "1-5" or "2,4,6-8". None or
            blank selects every page.
        total_pages: Number of pages in the document.

    Returns:
        Ascending list of distinct page numbers in [1, total_pages]. May be
        empty when nothing in the expression is usable.
    """
    pages, _ = resolve_page_range_with_trace(expression, total_pages)
    return pages
