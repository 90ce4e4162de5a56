from typing import Sequence, TypeVar
from ed_tracker.core.paging import page_count, page_slice

T = TypeVar("T")


class RotationController:
    """
    Pages a bounded display window through a longer ordered list.

    The page advances on every tick, wrapping to the first page, and snaps
    back to the first page whenever the list length changes. State is local
    to one display surface.
    """
    def __init__(self, page_size: int = 3):
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.page_size = page_size
        self.page = 0
        self.length = 0

    @property
    def page_count(self) -> int:
        return page_count(self.length, self.page_size)

    def observe(self, length: int) -> None:
        if length != self.length:
            self.length = length
            self.page = 0

    def tick(self) -> int:
        pages = self.page_count
        self.page = (self.page + 1) % pages if pages > 1 else 0
        return self.page

    def window(self, items: Sequence[T]) -> list[T]:
        self.observe(len(items))
        return page_slice(items, self.page, self.page_size)
