"""
Page request and page result used between the product controller and service.
"""

import math
from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """
    A request for one ordered slice of a result set.

    page is zero-based, size is the number of rows per page.
    """
    page: int
    size: int
    sort_by: str = "created_at"
    descending: bool = True

    def __post_init__(self):
        if self.page < 0:
            raise ValueError("page must not be negative")
        if self.size < 1:
            raise ValueError("size must be at least 1")

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass
class Page(Generic[T]):
    content: List[T] = field(default_factory=list)
    page: int = 0
    size: int = 1
    total_elements: int = 0

    @property
    def total_pages(self) -> int:
        if self.size < 1:
            return 0
        return math.ceil(self.total_elements / self.size)
