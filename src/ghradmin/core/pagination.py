"""Traversal of paginated GitHub listings."""

from collections.abc import Callable, Iterator
from typing import Generic, TypeVar
from urllib.parse import parse_qs, urlsplit
import re

from ghradmin.models.page import Page

T = TypeVar("T")

DEFAULT_PER_PAGE = 20

# <https://api.github.com/repositories/194783954/releases?per_page=1&page=2>; rel="next"
LINK_NEXT = re.compile(r'<([^>]+)>; rel="next"')


class StopFetch(Exception):
    """Raised by a fetch callback to end the traversal without an error."""

    pass


def parse_next_page(link: str) -> int:
    """Extract the next page number from one ``Link`` header value.

    Returns 0 when the value has no ``rel="next"`` entry. Raises ValueError
    when the entry exists but its URL has no usable ``page`` query.
    """
    match = LINK_NEXT.search(link)
    if match is None:
        return 0

    try:
        query = urlsplit(match.group(1)).query
    except ValueError as e:
        raise ValueError(f"invalid url: {e}") from e

    values = parse_qs(query).get("page")
    page = values[0].strip() if values else ""
    if not page:
        raise ValueError("page query not defined")
    try:
        return int(page)
    except ValueError as e:
        raise ValueError(f"invalid page query: {page!r}") from e


class Paginator(Generic[T]):
    """Restartable, finite, lazy sequence over a paginated listing.

    ``list_page(per_page, page)`` fetches one page. Iterating yields
    ``(item, page)`` pairs in server order; every new iteration starts over
    from ``start_page`` and re-fetches.
    """

    def __init__(
        self,
        list_page: Callable[[int, int], Page[T]],
        start_page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
    ):
        self.list_page = list_page
        self.start_page = start_page if start_page >= 1 else 1
        self.per_page = per_page if per_page >= 1 else DEFAULT_PER_PAGE

    def pages(self) -> Iterator[Page[T]]:
        page = self.start_page
        while page > 0:
            listing = self.list_page(self.per_page, page)
            yield listing
            page = listing.next_page

    def __iter__(self) -> Iterator[tuple[T, int]]:
        for listing in self.pages():
            for item in listing.items:
                yield item, listing.page


def fetch(paginator: Paginator[T], callback: Callable[[T, int], None]) -> None:
    """Call ``callback(item, page)`` for every item of ``paginator``.

    The first exception from a list call or the callback propagates, except
    StopFetch which ends the traversal quietly.
    """
    try:
        for item, page in paginator:
            callback(item, page)
    except StopFetch:
        return
