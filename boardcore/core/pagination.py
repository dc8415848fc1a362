"""Pagination arithmetic for listings."""

import math
from dataclasses import dataclass, field


@dataclass
class PageLink:
    page: int
    active: bool


@dataclass
class Pagination:
    """Computed pagination window.

    Attributes:
        from_: Zero-based offset of the first item on the current page,
            suitable for a query builder offset().
        page_links: The window of page numbers to render around the current page.
    """

    total_items: int
    current_page: int
    items_per_page: int
    total_pages: int
    from_item: int
    to_item: int
    from_: int
    has_first: bool
    has_previous: bool
    has_next: bool
    has_last: bool
    first_page: int
    previous_page: int | None
    next_page: int | None
    last_page: int
    page_links: list[PageLink] = field(default_factory=list)
    include_left_ellipsis: bool = False
    include_right_ellipsis: bool = False


def paginate(
    total_items: int,
    current_page: int = 1,
    items_per_page: int = 20,
    max_page_links: int = 5,
) -> Pagination:
    """Compute the pagination window for a listing.

    The current page is clamped into [1, total_pages] (and to 1 when there
    are no items at all).

    Args:
        total_items: Number of items in the full listing.
        current_page: Requested page, 1-based.
        items_per_page: Page size; must be positive.
        max_page_links: Maximum number of numbered page links to show.

    Raises:
        ValueError: If items_per_page or max_page_links is not positive.
    """
    if items_per_page <= 0:
        raise ValueError("items_per_page must be positive")
    if max_page_links <= 0:
        raise ValueError("max_page_links must be positive")

    total_pages = math.ceil(total_items / items_per_page)
    current_page = max(1, min(current_page, total_pages))

    from_item = (current_page - 1) * items_per_page + 1
    to_item = min(from_item + items_per_page - 1, total_items)
    offset = (current_page - 1) * items_per_page

    start_page = max(1, current_page - max_page_links // 2)
    end_page = min(total_pages, start_page + max_page_links - 1)

    if end_page - start_page + 1 < max_page_links:
        start_page = max(1, end_page - max_page_links + 1)

    page_links = [
        PageLink(page=page, active=page == current_page)
        for page in range(start_page, end_page + 1)
    ]

    return Pagination(
        total_items=total_items,
        current_page=current_page,
        items_per_page=items_per_page,
        total_pages=total_pages,
        from_item=from_item,
        to_item=to_item,
        from_=offset,
        has_first=current_page > 1,
        has_previous=current_page > 1,
        has_next=current_page < total_pages,
        has_last=current_page < total_pages,
        first_page=1,
        previous_page=current_page - 1 if current_page > 1 else None,
        next_page=current_page + 1 if current_page < total_pages else None,
        last_page=total_pages,
        page_links=page_links,
        include_left_ellipsis=start_page > 1,
        include_right_ellipsis=end_page < total_pages,
    )
