from dataclasses import dataclass, replace
from math import ceil


def total_pages_for(total_count: int | str, page_size: int) -> int:
    """Number of pages for ``total_count`` rows; never less than one."""
    count = int(total_count)
    if count <= 0:
        return 1
    return ceil(count / page_size)


def parse_page(raw: str | int | None) -> int:
    """Reads a page number typed by the user; unreadable input means page 1."""
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return 1


@dataclass(frozen=True)
class PageState:
    """Pagination cursor of the listing."""

    page_size: int = 30
    current_page: int = 1
    total_pages: int = 1

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.page_size

    def clamp(self, page: int) -> int:
        return min(max(page, 1), self.total_pages)

    def at_page(self, page: int) -> "PageState":
        return replace(self, current_page=self.clamp(page))

    def first(self) -> "PageState":
        return replace(self, current_page=1)

    def with_total_count(self, total_count: int | str) -> "PageState":
        total_pages = total_pages_for(total_count, self.page_size)
        return replace(
            self,
            total_pages=total_pages,
            current_page=min(max(self.current_page, 1), total_pages),
        )

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1
