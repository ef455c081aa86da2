from dataclasses import dataclass
from typing import List, Mapping, Any

WINDOW_SIZE = 5


def page_window(page: int, total_pages: int, size: int = WINDOW_SIZE) -> List[int]:
    """
    Contiguous page numbers to show as links, at most `size` of them,
    centred on `page` and shifted to stay inside [1, total_pages].
    """
    start = page - size // 2
    end = page + size // 2

    if total_pages <= size:
        start, end = 1, total_pages
    else:
        if start < 1:
            start, end = 1, size
        if end > total_pages:
            start, end = total_pages - size + 1, total_pages

    start = max(start, 1)
    end = min(end, total_pages)
    return list(range(start, end + 1))


@dataclass(frozen=True)
class PageControls:
    page: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool
    pages: List[int]

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, Any]) -> "PageControls":
        page = int(metadata["page"])
        total_pages = int(metadata["totalPages"])
        return cls(
            page=page,
            total_pages=total_pages,
            has_previous_page=bool(metadata["hasPreviousPage"]),
            has_next_page=bool(metadata["hasNextPage"]),
            pages=page_window(page, total_pages),
        )

    @property
    def first(self) -> int:
        return 1

    @property
    def previous(self) -> int:
        return max(1, self.page - 1)

    @property
    def next(self) -> int:
        return min(self.total_pages, self.page + 1) if self.total_pages else 1

    @property
    def last(self) -> int:
        return max(1, self.total_pages)
