import math
from typing import Sequence, TypeVar

T = TypeVar("T")

def page_count(total: int, size: int) -> int:
    return math.ceil(total / size) if total > 0 else 0

def page_slice(items: Sequence[T], page: int, size: int) -> list[T]:
    start = page * size
    return list(items[start:start + size])
