"""Paginated list envelope."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a paginated listing.

    ``next_page`` is 0 when the server reported no further pages.
    """

    page: int
    items: list[T] = field(default_factory=list)
    next_page: int = 0
