"""Page-window rendering and page-size policy shared by every admin list."""
from typing import List, Optional, Union

DEFAULT_PAGE_LIMIT = 10
ELLIPSIS = "..."

PageMarker = Union[int, str]


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(page, max(1, total_pages)))


def resolve_page_limit(declared: Optional[object], item_count: int) -> int:
    """Server-declared page size, else the size of the page, else the default."""
    if isinstance(declared, int) and not isinstance(declared, bool) and declared > 0:
        return declared
    return item_count or DEFAULT_PAGE_LIMIT


def page_window(current_page: int, total_pages: int) -> List[PageMarker]:
    """Page buttons to render.

    Page 1 and the last page are always shown, plus the current page and its
    neighbours. The page just outside the neighbours on each side becomes an
    ellipsis, so a gap never produces two markers in a row.

    >>> page_window(5, 10)
    [1, '...', 4, 5, 6, '...', 10]
    """
    window: List[PageMarker] = []
    for page in range(1, total_pages + 1):
        if page == 1 or page == total_pages or current_page - 1 <= page <= current_page + 1:
            window.append(page)
        elif (page == current_page - 2 and page > 1) or (page == current_page + 2 and page < total_pages):
            window.append(ELLIPSIS)
    return window
