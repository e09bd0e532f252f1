"""
Userbase library to plan pages of list responses
"""

import math
from typing import Callable, NamedTuple, Optional, Tuple

from .. import schemas


DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 20


class PageDescriptor(NamedTuple):
    page_number: int
    page_size: int
    total_count: int
    total_pages: int
    has_previous: bool
    has_next: bool


def clamp_page_request(page_number: int, page_size: int) -> Tuple[int, int]:
    """
    Clamp the requested page number and size to their allowed ranges
    """

    return max(1, page_number), min(max(page_size, MIN_PAGE_SIZE), MAX_PAGE_SIZE)


def plan(requested_page: int, requested_size: int, total_count: int, has_next: bool) -> PageDescriptor:
    """
    Compute the page window and its metadata for a page request

    :param requested_page: page number as requested by the client (any integer)
    :param requested_size: page size as requested by the client (any integer)
    :param total_count: total number of records as reported by the storage
    :param has_next: flag of the storage whether records exist beyond the page window
    :return: descriptor of the clamped page
    """

    if total_count < 0:
        raise ValueError(f"Total count must not be negative, got {total_count}")
    page_number, page_size = clamp_page_request(requested_page, requested_size)
    return PageDescriptor(
        page_number=page_number,
        page_size=page_size,
        total_count=total_count,
        total_pages=math.ceil(total_count / page_size),
        has_previous=page_number > 1,
        has_next=has_next
    )


def build_links(
        page: PageDescriptor,
        link_for: Callable[[int, int], str]
) -> Tuple[Optional[str], Optional[str]]:
    """
    Build the links to the previous and next page, if those pages exist

    :param page: descriptor of the current page
    :param link_for: callable returning the link for a page number and page size
    :return: tuple of the previous and the next page link
    """

    previous_link = link_for(page.page_number - 1, page.page_size) if page.has_previous else None
    next_link = link_for(page.page_number + 1, page.page_size) if page.has_next else None
    return previous_link, next_link


def make_header(page: PageDescriptor, link_for: Callable[[int, int], str]) -> schemas.PaginationHeader:
    previous_link, next_link = build_links(page, link_for)
    return schemas.PaginationHeader(
        previous_page_link=previous_link,
        next_page_link=next_link,
        total_count=page.total_count,
        page_size=page.page_size,
        current_page=page.page_number,
        total_pages=page.total_pages
    )
