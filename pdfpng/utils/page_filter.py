"""Utility functions for page selection and filtering."""

from typing import Optional, Tuple

PageSelection = Tuple[int, ...]


def _to_int(token: str) -> Optional[int]:
    try:
        return int(token.strip())
    except ValueError:
        return None


def _clamp(value: int, max_page: int) -> int:
    return max(1, min(value, max_page))


def parse_page_range(page_range: str, max_page: int) -> PageSelection:
    """
    Parse page range string into an ordered selection of page numbers.

    Malformed parts never raise: non-numeric tokens and out-of-range single
    pages are dropped, range bounds are clamped into [1, max_page] and
    reversed ranges are normalized.

    Args:
        page_range: Page range string (e.g., "1,3,5-10").
                   Pages are 1-indexed. Empty means every page.
        max_page: Page count of the loaded document

    Returns:
        Strictly increasing tuple of page numbers (1-indexed), possibly empty
    """
    if max_page < 1:
        return ()

    if not page_range or not page_range.strip():
        return tuple(range(1, max_page + 1))

    pages = set()

    for part in page_range.split(','):
        part = part.strip()
        if not part:
            continue

        if '-' in part:
            start_token, end_token = part.split('-', 1)
            start = _to_int(start_token)
            end = _to_int(end_token)
            if start is None or end is None:
                continue
            start = _clamp(start, max_page)
            end = _clamp(end, max_page)
            pages.update(range(min(start, end), max(start, end) + 1))
        else:
            page = _to_int(part)
            if page is not None and 1 <= page <= max_page:
                pages.add(page)

    return tuple(sorted(pages))
