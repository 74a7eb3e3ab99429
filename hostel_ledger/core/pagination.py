"""
Pagination helpers shared by the list operations.
"""

from typing import Optional, Tuple

from hostel_ledger.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def normalize_pagination(page: Optional[int], page_size: Optional[int]) -> Tuple[int, int]:
    """
    Clamp page and page size into the supported range.

    Page is at least 1; page size falls back to the default when missing
    or non-positive and is capped at the maximum.
    """
    page = page if page and page > 0 else DEFAULT_PAGE
    if not page_size or page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    return page, min(page_size, MAX_PAGE_SIZE)


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size
