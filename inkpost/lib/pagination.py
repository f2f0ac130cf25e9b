"""Page/limit pagination shared by list endpoints."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def clamp(value: int, low: int, high: int | None = None) -> int:
    if value < low:
        return low
    if high is not None and value > high:
        return high
    return value


@dataclass
class PageMeta:
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> PageMeta:
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Paginated(Generic[T]):
    data: list[T] = field(default_factory=list)
    meta: PageMeta | None = None
