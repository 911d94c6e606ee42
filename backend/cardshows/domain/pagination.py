from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int

    @classmethod
    def from_request(cls, page: Optional[int] = None, page_size: Optional[int] = None) -> "Pagination":
        page = page if page is not None and page >= 1 else 1
        if page_size is None or page_size <= 0:
            page_size = DEFAULT_PAGE_SIZE
        return cls(page=page, page_size=min(page_size, MAX_PAGE_SIZE))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    def total_pages(self, total_count: int) -> int:
        return math.ceil(max(total_count, 1) / self.page_size)

    def has_more(self, total_count: int) -> bool:
        return self.offset + self.page_size < total_count

    def window(self, items: list) -> list:
        return items[self.offset : self.offset + self.limit]

    def meta(self, total_count: int) -> dict:
        return {
            "total_count": total_count,
            "page_size": self.page_size,
            "current_page": self.page,
            "total_pages": self.total_pages(total_count),
            "has_more": self.has_more(total_count),
        }
